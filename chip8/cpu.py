import logging
import random

from chip8.exception import RomLoadException, StackOverflowException, StackUnderflowException
from chip8.keypad import Keypad
from chip8.masks import *
from chip8.screen import Screen

logger = logging.getLogger(__name__)

# The total amount of memory to allocate for the emulator
MAX_MEMORY = 4096

# Where the program counter should originally point, and where the ROM is loaded
PROGRAM_COUNTER_START = 0x200

# The largest ROM that fits between the program start and the end of memory
MAX_ROM_SIZE = MAX_MEMORY - PROGRAM_COUNTER_START

# The total number of registers in the Chip 8 CPU
NUM_REGISTERS = 0x10

# The number of return addresses the stack can hold
STACK_DEPTH = 0x10

# Where the font sprites live in memory, and how many bytes make up one glyph
FONT_START = 0x000
FONT_GLYPH_SIZE = 5

# The built in font, one 8 x 5 sprite for each of the hex digits 0 - F. For
# example, the character 2 is drawn from the bytes F0 10 F0 80 F0:
#
#     ****....
#     ...*....
#     ****....
#     *.......
#     ****....
FONT_SPRITES = bytes([
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
])

# C L A S S E S ###############################################################


class CPU(object):
    """
    A class to emulate a Chip 8 CPU. There are several good resources out on
    the web that describe the internals of the Chip 8 CPU. For example:

        http://devernay.free.fr/hacks/chip8/C8TECH10.HTM
        http://michael.toren.net/mirrors/chip8/chip8def.htm

    To summarize these sources, the Chip 8 has:

        * 16 x 8-bit general purpose registers (V0 - VF**)
        * 1 x 16-bit index register (I)
        * 1 x 16-bit program counter (PC)
        * a stack of 16 x 16-bit return addresses, with a stack pointer (SP)
        * 1 x 8-bit delay timer (DT)
        * 1 x 8-bit sound timer (ST)

    ** VF is a special register - it is used to store the overflow bit

    The CPU owns the screen and the keypad it works on. Nothing here talks to
    a window or to real keys; the caller pushes key state in with
    cpu_set_key() and reads pixels out with cpu_read_framebuffer().
    """
    def __init__(self, rom_data=b'', rng=None):
        """
        Initialize the Chip8 CPU with the program to run.

        :param rom_data: the bytes of the program to load at 0x200
        :param rng: a random.Random style source used by the RAND instruction
        """
        rom_data = bytes(rom_data)
        if len(rom_data) > MAX_ROM_SIZE:
            raise RomLoadException(len(rom_data), MAX_ROM_SIZE)

        # There are two timer registers, one for sound and one that is general
        # purpose known as the delay timer. The timers are loaded with a value
        # and then decremented 60 times per second.
        self.cpu_timers = {
            'delay': 0,
            'sound': 0,
        }

        # Defines the general purpose, index, stack pointer and program
        # counter registers.
        self.cpu_registers = {
            'v': [],
            'index': 0,
            'sp': 0,
            'pc': 0,
        }

        # The operation_lookup table is executed according to the most
        # significant nibble of the operand (e.g. operand 8nnn would call
        # self.cpu_execute_logical_instruction)
        self.cpu_operation_lookup = {
            0x0: self.cpu_clear_return,                  # 0nnn - SYS  nnn
            0x1: self.cpu_jump_to_address,               # 1nnn - JUMP nnn
            0x2: self.cpu_jump_to_subroutine,            # 2nnn - CALL nnn
            0x3: self.cpu_skip_if_reg_equal_val,         # 3snn - SKE  Vs, nn
            0x4: self.cpu_skip_if_reg_not_equal_val,     # 4snn - SKNE Vs, nn
            0x5: self.cpu_skip_if_reg_equal_reg,         # 5st0 - SKE  Vs, Vt
            0x6: self.cpu_move_value_to_reg,             # 6snn - LOAD Vs, nn
            0x7: self.cpu_add_value_to_reg,              # 7snn - ADD  Vs, nn
            0x8: self.cpu_execute_logical_instruction,   # see subfunctions below
            0x9: self.cpu_skip_if_reg_not_equal_reg,     # 9st0 - SKNE Vs, Vt
            0xA: self.cpu_load_index_reg_with_value,     # Annn - LOAD I, nnn
            0xB: self.cpu_jump_to_v0_plus_value,         # Bnnn - JUMP [V0] + nnn
            0xC: self.cpu_generate_random_number,        # Ctnn - RAND Vt, nn
            0xD: self.cpu_draw_sprite,                   # Dstn - DRAW Vs, Vt, n
            0xE: self.cpu_keyboard_routines,             # see subfunctions below
            0xF: self.cpu_misc_routines,                 # see subfunctions below
        }

        # This set of operations is invoked when the operand loaded into the
        # CPU starts with 8 (e.g. operand 8st0 would call
        # self.cpu_move_reg_into_reg)
        self.cpu_logical_operation_lookup = {
            0x0: self.cpu_move_reg_into_reg,             # 8st0 - LOAD Vs, Vt
            0x1: self.cpu_logical_or,                    # 8st1 - OR   Vs, Vt
            0x2: self.cpu_logical_and,                   # 8st2 - AND  Vs, Vt
            0x3: self.cpu_exclusive_or,                  # 8st3 - XOR  Vs, Vt
            0x4: self.cpu_add_reg_to_reg,                # 8st4 - ADD  Vs, Vt
            0x5: self.cpu_subtract_reg_from_reg,         # 8st5 - SUB  Vs, Vt
            0x6: self.cpu_right_shift_reg,               # 8st6 - SHR  Vs, Vt
            0x7: self.cpu_subtract_reg_from_reg1,        # 8st7 - SUBN Vs, Vt
            0xE: self.cpu_left_shift_reg,                # 8stE - SHL  Vs, Vt
        }

        # This set of operations is invoked when the operand loaded into the
        # CPU starts with F (e.g. operand Fs07 would call
        # self.cpu_move_delay_timer_into_reg)
        self.cpu_misc_routine_lookup = {
            0x07: self.cpu_move_delay_timer_into_reg,    # Ft07 - LOAD Vt, DELAY
            0x0A: self.cpu_wait_for_keypress,            # Ft0A - KEYD Vt
            0x15: self.cpu_move_reg_into_delay_timer,    # Fs15 - LOAD DELAY, Vs
            0x18: self.cpu_move_reg_into_sound_timer,    # Fs18 - LOAD SOUND, Vs
            0x1E: self.cpu_add_reg_into_index,           # Fs1E - ADD  I, Vs
            0x29: self.cpu_load_index_with_reg_sprite,   # Fs29 - LOAD I, Vs
            0x33: self.cpu_store_bcd_in_memory,          # Fs33 - BCD
            0x55: self.cpu_store_regs_in_memory,         # Fs55 - STOR [I], Vs
            0x65: self.cpu_read_regs_from_memory,        # Fs65 - LOAD Vs, [I]
        }
        self.cpu_operand = 0
        self.cpu_rom_data = rom_data
        self.cpu_rng = rng if rng is not None else random.Random()
        self.cpu_screen = Screen()
        self.cpu_keypad = Keypad()
        self.cpu_memory = bytearray(MAX_MEMORY)
        self.cpu_stack = []
        self.cpu_reset()

    @classmethod
    def from_rom_file(cls, filename, rng=None):
        """
        Build a CPU from the ROM stored in the named file.

        :param filename: the name of the file to load
        :param rng: a random.Random style source used by the RAND instruction
        :return: the new CPU
        """
        with open(filename, 'rb') as rom_file:
            rom_data = rom_file.read()
        logger.debug("Loaded {} bytes from {}".format(len(rom_data), filename))
        return cls(rom_data, rng=rng)

    def __str__(self):
        val = 'PC: {:4X}  OP: {:4X}\n'.format(
            self.cpu_registers['pc'], self.cpu_operand)
        for index in range(NUM_REGISTERS):
            val += 'V{:X}: {:2X}\n'.format(index, self.cpu_registers['v'][index])
        val += 'I: {:4X}\n'.format(self.cpu_registers['index'])
        val += 'SP: {:X}  STACK: {}\n'.format(
            self.cpu_registers['sp'],
            ' '.join('{:4X}'.format(address) for address in self.cpu_stack))
        val += 'DT: {:2X}  ST: {:2X}\n'.format(
            self.cpu_timers['delay'], self.cpu_timers['sound'])
        return val

    def cpu_x_index(self):
        return (self.cpu_operand & X_MASK) >> X_SHIFT

    def cpu_y_index(self):
        return (self.cpu_operand & Y_MASK) >> Y_SHIFT

    def cpu_execute_instruction(self):
        """
        Execute the next instruction pointed to by the program counter. The
        program counter is increased by 2 before the instruction runs, so
        jumps overwrite the new value and skips add a further 2.

        :return: returns the operand executed
        """
        cpu_pc = self.cpu_registers['pc']
        cpu_operand = self.cpu_memory[cpu_pc % MAX_MEMORY] << 8
        cpu_operand |= self.cpu_memory[(cpu_pc + 1) % MAX_MEMORY]
        self.cpu_registers['pc'] = (cpu_pc + 2) & WORD_MASK
        return self.cpu_execute_opcode(cpu_operand)

    def cpu_execute_opcode(self, cpu_operand):
        """
        Execute the specified operand against the current state, without
        fetching it or moving the program counter first. Useful for testing
        single instructions.

        :param cpu_operand: the operand to execute
        :return: returns the operand executed
        """
        self.cpu_operand = cpu_operand
        cpu_operation = (cpu_operand & FAMILY_MASK) >> FAMILY_SHIFT
        self.cpu_operation_lookup[cpu_operation]()
        return cpu_operand

    def cpu_unknown_operand(self):
        logger.debug("Ignoring unknown op-code: {:04X}".format(self.cpu_operand))

    def cpu_skip_next_instruction(self):
        self.cpu_registers['pc'] = (self.cpu_registers['pc'] + 2) & WORD_MASK

    def cpu_execute_logical_instruction(self):
        """
        Execute the logical instruction based upon the current operand.
        """
        cpu_operation = self.cpu_operand & N_MASK
        self.cpu_logical_operation_lookup.get(cpu_operation, self.cpu_unknown_operand)()

    def cpu_keyboard_routines(self):
        """
        Run the specified keyboard routine based upon the operand. These
        operations are:

            Es9E - SKPR Vs
            EsA1 - SKUP Vs

        0x9E will check to see if the key specified in the source register is
        pressed, and if it is, skips the next instruction. Operation 0xA1 will
        again check for the specified keypress in the source register, and
        if it is NOT pressed, will skip the next instruction. Only the low
        nibble of the source register names the key. The register
        calculations are as follows:

           Bits:  15-12    11-8      7-4      3-0
                  unused   source  9 or A    E or 1
        """
        cpu_operation = self.cpu_operand & NN_MASK
        cpu_key_to_check = self.cpu_registers['v'][self.cpu_x_index()] & N_MASK

        if cpu_operation == 0x9E:
            if self.cpu_keypad.is_key_down(cpu_key_to_check):
                self.cpu_skip_next_instruction()

        elif cpu_operation == 0xA1:
            if not self.cpu_keypad.is_key_down(cpu_key_to_check):
                self.cpu_skip_next_instruction()

        else:
            self.cpu_unknown_operand()

    def cpu_misc_routines(self):
        """
        Will execute one of the routines specified in misc_routines.
        """
        cpu_operation = self.cpu_operand & NN_MASK
        self.cpu_misc_routine_lookup.get(cpu_operation, self.cpu_unknown_operand)()

    def cpu_clear_return(self):
        """
        Opcodes starting with a 0 are one of the following instructions:

            0nnn - Jump to machine code function (ignored)
            00E0 - Clear the display
            00EE - Return from subroutine
        """
        if self.cpu_operand == 0x00E0:
            self.cpu_screen.clear_screen()

        elif self.cpu_operand == 0x00EE:
            if self.cpu_registers['sp'] == 0:
                raise StackUnderflowException((self.cpu_registers['pc'] - 2) & WORD_MASK)
            self.cpu_registers['pc'] = self.cpu_stack.pop()
            self.cpu_registers['sp'] -= 1

        else:
            self.cpu_unknown_operand()

    def cpu_jump_to_address(self):
        """
        1nnn - JUMP nnn

        Jump to address. The address to jump to is calculated using the bits
        taken from the operand as follows:

           Bits:  15-12    11-8      7-4      3-0
                  unused  address  address  address
        """
        self.cpu_registers['pc'] = self.cpu_operand & NNN_MASK

    def cpu_jump_to_subroutine(self):
        """
        2nnn - CALL nnn

        Jump to subroutine. Save the current program counter on the stack. The
        subroutine to jump to is taken from the operand as follows:

           Bits:  15-12    11-8      7-4      3-0
                  unused  address  address  address
        """
        if self.cpu_registers['sp'] == STACK_DEPTH:
            raise StackOverflowException((self.cpu_registers['pc'] - 2) & WORD_MASK)
        self.cpu_stack.append(self.cpu_registers['pc'])
        self.cpu_registers['sp'] += 1
        self.cpu_registers['pc'] = self.cpu_operand & NNN_MASK

    def cpu_skip_if_reg_equal_val(self):
        """
        3snn - SKE Vs, nn

        Skip if register contents equal to constant value. The calculation for
        the register and constant is performed on the operand:

           Bits:  15-12     11-8      7-4       3-0
                  unused   source  constant  constant

        The program counter is updated to skip the next instruction by
        advancing it by 2 bytes.
        """
        if self.cpu_registers['v'][self.cpu_x_index()] == (self.cpu_operand & NN_MASK):
            self.cpu_skip_next_instruction()

    def cpu_skip_if_reg_not_equal_val(self):
        """
        4snn - SKNE Vs, nn

        Skip if register contents not equal to constant value. The calculation
        for the register and constant is performed on the operand:

           Bits:  15-12     11-8      7-4       3-0
                  unused   source  constant  constant
        """
        if self.cpu_registers['v'][self.cpu_x_index()] != (self.cpu_operand & NN_MASK):
            self.cpu_skip_next_instruction()

    def cpu_skip_if_reg_equal_reg(self):
        """
        5st0 - SKE Vs, Vt

        Skip if source register is equal to target register. The calculation
        for the registers to use is performed on the operand:

           Bits:  15-12     11-8      7-4       3-0
                  unused   source    target      0
        """
        if self.cpu_operand & N_MASK:
            self.cpu_unknown_operand()
            return
        cpu_registers = self.cpu_registers['v']
        if cpu_registers[self.cpu_x_index()] == cpu_registers[self.cpu_y_index()]:
            self.cpu_skip_next_instruction()

    def cpu_move_value_to_reg(self):
        """
        6snn - LOAD Vs, nn

        Move the constant value into the specified register. The calculation
        for the registers is performed on the operand:

           Bits:  15-12     11-8      7-4       3-0
                  unused   target    value     value
        """
        self.cpu_registers['v'][self.cpu_x_index()] = self.cpu_operand & NN_MASK

    def cpu_add_value_to_reg(self):
        """
        7snn - ADD Vs, nn

        Add the constant value to the specified register, wrapping around at
        256. The carry flag is not touched.

           Bits:  15-12     11-8      7-4       3-0
                  unused   target    value     value
        """
        cpu_target = self.cpu_x_index()
        temp = self.cpu_registers['v'][cpu_target] + (self.cpu_operand & NN_MASK)
        self.cpu_registers['v'][cpu_target] = temp & BYTE_MASK

    def cpu_move_reg_into_reg(self):
        """
        8st0 - LOAD Vs, Vt

        Move the value of the source register into the value of the target
        register. The calculation for the registers is performed on the
        operand:

           Bits:  15-12     11-8      7-4       3-0
                  unused   target    source      0
        """
        self.cpu_registers['v'][self.cpu_x_index()] = self.cpu_registers['v'][self.cpu_y_index()]

    def cpu_logical_or(self):
        """
        8ts1 - OR   Vs, Vt

        Perform a logical OR operation between the source and the target
        register, and store the result in the target register.
        """
        self.cpu_registers['v'][self.cpu_x_index()] |= self.cpu_registers['v'][self.cpu_y_index()]

    def cpu_logical_and(self):
        """
        8ts2 - AND  Vs, Vt
        """
        self.cpu_registers['v'][self.cpu_x_index()] &= self.cpu_registers['v'][self.cpu_y_index()]

    def cpu_exclusive_or(self):
        """
        8ts3 - XOR  Vs, Vt
        """
        self.cpu_registers['v'][self.cpu_x_index()] ^= self.cpu_registers['v'][self.cpu_y_index()]

    def cpu_add_reg_to_reg(self):
        """
        8ts4 - ADD  Vt, Vs

        Add the value in the source register to the value in the target
        register, and store the result in the target register. The register
        calculations are as follows:

           Bits:  15-12     11-8      7-4       3-0
                  unused   target    source      4

        If a carry is generated, set a carry flag in register VF.
        """
        cpu_target = self.cpu_x_index()
        temp = self.cpu_registers['v'][cpu_target] + self.cpu_registers['v'][self.cpu_y_index()]
        cpu_carry = 1 if temp > BYTE_MASK else 0
        self.cpu_registers['v'][cpu_target] = temp & BYTE_MASK
        self.cpu_registers['v'][0xF] = cpu_carry

    def cpu_subtract_reg_from_reg(self):
        """
        8ts5 - SUB  Vt, Vs

        Subtract the value in the source register from the value in the
        target register, and store the result in the target register. The
        register calculations are as follows:

           Bits:  15-12     11-8      7-4       3-0
                  unused   target    source      5

        If a borrow is NOT generated, set a carry flag in register VF.
        """
        cpu_target = self.cpu_x_index()
        cpu_source_reg = self.cpu_registers['v'][self.cpu_y_index()]
        cpu_target_reg = self.cpu_registers['v'][cpu_target]
        cpu_not_borrow = 1 if cpu_target_reg >= cpu_source_reg else 0
        self.cpu_registers['v'][cpu_target] = (cpu_target_reg - cpu_source_reg) & BYTE_MASK
        self.cpu_registers['v'][0xF] = cpu_not_borrow

    def cpu_right_shift_reg(self):
        """
        8ts6 - SHR  Vt, Vs

        Shift the bits in the source register 1 bit to the right and store
        the result in the target register. Bit 0 of the source register will
        be shifted into register VF. The register calculation is as follows:

           Bits:  15-12     11-8      7-4       3-0
                  unused   target    source      6
        """
        cpu_source_reg = self.cpu_registers['v'][self.cpu_y_index()]
        cpu_bit_zero = cpu_source_reg & BIT_ZERO
        self.cpu_registers['v'][self.cpu_x_index()] = cpu_source_reg >> 1
        self.cpu_registers['v'][0xF] = cpu_bit_zero

    def cpu_subtract_reg_from_reg1(self):
        """
        8ts7 - SUBN Vt, Vs

        Subtract the value in the target register from the value in the
        source register, and store the result in the target register. The
        register calculations are as follows:

           Bits:  15-12     11-8      7-4       3-0
                  unused   target    source      7

        If a borrow is NOT generated, set a carry flag in register VF.
        """
        cpu_target = self.cpu_x_index()
        cpu_source_reg = self.cpu_registers['v'][self.cpu_y_index()]
        cpu_target_reg = self.cpu_registers['v'][cpu_target]
        cpu_not_borrow = 1 if cpu_source_reg >= cpu_target_reg else 0
        self.cpu_registers['v'][cpu_target] = (cpu_source_reg - cpu_target_reg) & BYTE_MASK
        self.cpu_registers['v'][0xF] = cpu_not_borrow

    def cpu_left_shift_reg(self):
        """
        8tsE - SHL  Vt, Vs

        Shift the bits in the source register 1 bit to the left and store
        the result in the target register. Bit 7 of the source register will
        be shifted into register VF. The register calculation is as follows:

           Bits:  15-12     11-8      7-4       3-0
                  unused   target    source      E
        """
        cpu_source_reg = self.cpu_registers['v'][self.cpu_y_index()]
        cpu_bit_seven = (cpu_source_reg & BIT_SEVEN) >> 7
        self.cpu_registers['v'][self.cpu_x_index()] = (cpu_source_reg << 1) & BYTE_MASK
        self.cpu_registers['v'][0xF] = cpu_bit_seven

    def cpu_skip_if_reg_not_equal_reg(self):
        """
        9st0 - SKNE Vs, Vt

        Skip if source register is not equal to target register. The
        calculation for the registers to use is performed on the operand:

           Bits:  15-12     11-8      7-4       3-0
                  unused   source    target      0

        The program counter is updated to skip the next instruction by
        advancing it by 2 bytes.
        """
        if self.cpu_operand & N_MASK:
            self.cpu_unknown_operand()
            return
        cpu_registers = self.cpu_registers['v']
        if cpu_registers[self.cpu_x_index()] != cpu_registers[self.cpu_y_index()]:
            self.cpu_skip_next_instruction()

    def cpu_load_index_reg_with_value(self):
        """
        Annn - LOAD I, nnn

        Load index register with constant value. The calculation for the
        constant value is performed on the operand:

           Bits:  15-12     11-8      7-4       3-0
                  unused   constant  constant  constant
        """
        self.cpu_registers['index'] = self.cpu_operand & NNN_MASK

    def cpu_jump_to_v0_plus_value(self):
        """
        Bnnn - JUMP [V0] + nnn

        Load the program counter with the address in the operand plus the
        value of register V0:

           Bits:  15-12     11-8      7-4       3-0
                  unused   address  address  address
        """
        self.cpu_registers['pc'] = self.cpu_registers['v'][0] + (self.cpu_operand & NNN_MASK)

    def cpu_generate_random_number(self):
        """
        Ctnn - RAND Vt, nn

        A random number between 0 and 255 is generated. The contents of it are
        then ANDed with the constant value passed in the operand. The result is
        stored in the target register. The register and constant values are
        calculated as follows:

           Bits:  15-12     11-8      7-4       3-0
                  unused    target    value    value
        """
        cpu_value = self.cpu_operand & NN_MASK
        self.cpu_registers['v'][self.cpu_x_index()] = cpu_value & self.cpu_rng.randint(0, 255)

    def cpu_draw_sprite(self):
        """
        Dxyn - DRAW x, y, num_bytes

        Draws the sprite pointed to in the index register at the specified
        x and y coordinates. Each sprite is 8 bits (1 byte) wide. The
        num_bytes parameter sets how tall the sprite is. Consecutive bytes in
        the memory pointed to by the index register make up the rows of the
        sprite. See Screen.draw_sprite for the XOR and wrapping rules. If
        drawing causes any pixel to be turned off, then VF will be set to 1,
        otherwise it is set to 0.

           Bits:  15-12     11-8      7-4       3-0
                  unused    x_source  y_source  num_bytes
        """
        cpu_x_pos = self.cpu_registers['v'][self.cpu_x_index()]
        cpu_y_pos = self.cpu_registers['v'][self.cpu_y_index()]
        cpu_num_bytes = self.cpu_operand & N_MASK
        cpu_index = self.cpu_registers['index']
        cpu_sprite = bytes(self.cpu_memory[(cpu_index + offset) % MAX_MEMORY]
                           for offset in range(cpu_num_bytes))

        cpu_collision = self.cpu_screen.draw_sprite(cpu_x_pos, cpu_y_pos, cpu_sprite)
        self.cpu_registers['v'][0xF] = 1 if cpu_collision else 0

    def cpu_move_delay_timer_into_reg(self):
        """
        Ft07 - LOAD Vt, DELAY

        Move the value of the delay timer into the target register. The
        register calculation is as follows:

           Bits:  15-12     11-8      7-4       3-0
                  unused    target     0         7
        """
        self.cpu_registers['v'][self.cpu_x_index()] = self.cpu_timers['delay']

    def cpu_wait_for_keypress(self):
        """
        Ft0A - KEYD Vt

        Stop execution until a key is pressed. Move the value of the key
        pressed into the specified register. Execution is not actually
        suspended: while no key is down the program counter is moved back
        onto this instruction, so it runs again on the next call. When
        several keys are down the lowest one wins.

           Bits:  15-12     11-8      7-4       3-0
                  unused    target     0         A
        """
        cpu_key_pressed = self.cpu_keypad.any_key_down()
        if cpu_key_pressed is None:
            self.cpu_registers['pc'] = (self.cpu_registers['pc'] - 2) & WORD_MASK
            return
        self.cpu_registers['v'][self.cpu_x_index()] = cpu_key_pressed
        logger.debug("Key {:X} pressed, wait at {:04X} done".format(
            cpu_key_pressed, (self.cpu_registers['pc'] - 2) & WORD_MASK))

    def cpu_move_reg_into_delay_timer(self):
        """
        Fs15 - LOAD DELAY, Vs

        Move the value stored in the specified source register into the delay
        timer. The register calculation is as follows:

           Bits:  15-12     11-8      7-4       3-0
                  unused    source     1         5
        """
        self.cpu_timers['delay'] = self.cpu_registers['v'][self.cpu_x_index()]

    def cpu_move_reg_into_sound_timer(self):
        """
        Fs18 - LOAD SOUND, Vs
        """
        self.cpu_timers['sound'] = self.cpu_registers['v'][self.cpu_x_index()]

    def cpu_load_index_with_reg_sprite(self):
        """
        Fs29 - LOAD I, Vs

        Load the index with the sprite indicated in the source register. All
        sprites are 5 bytes long, so the location of the specified sprite
        is its index multiplied by 5. The register calculation is as
        follows:

           Bits:  15-12     11-8      7-4       3-0
                  unused    source     2         9
        """
        cpu_glyph = self.cpu_registers['v'][self.cpu_x_index()]
        self.cpu_registers['index'] = FONT_START + cpu_glyph * FONT_GLYPH_SIZE

    def cpu_add_reg_into_index(self):
        """
        Fs1E - ADD  I, Vs

        Add the value of the register into the index register value. The
        flag register is left alone, the index simply wraps at 16 bits.
        """
        cpu_sum = self.cpu_registers['index'] + self.cpu_registers['v'][self.cpu_x_index()]
        self.cpu_registers['index'] = cpu_sum & WORD_MASK

    def cpu_store_bcd_in_memory(self):
        """
        Fs33 - BCD

        Take the value stored in source and place the digits in the following
        locations:

            hundreds   -> self.memory[index]
            tens       -> self.memory[index + 1]
            ones       -> self.memory[index + 2]

        For example, if the value is 123, then the following values will be
        placed at the specified locations:

             1 -> self.memory[index]
             2 -> self.memory[index + 1]
             3 -> self.memory[index + 2]

        The register calculation is as follows:

           Bits:  15-12     11-8      7-4       3-0
                  unused    source     3         3
        """
        cpu_value = self.cpu_registers['v'][self.cpu_x_index()]
        cpu_digits = (cpu_value // 100, (cpu_value // 10) % 10, cpu_value % 10)
        for cpu_offset, cpu_digit in enumerate(cpu_digits):
            self.cpu_memory[(self.cpu_registers['index'] + cpu_offset) % MAX_MEMORY] = cpu_digit

    def cpu_store_regs_in_memory(self):
        """
        Fs55 - STOR [I], Vs

        Store the V registers V0 through Vs in the memory pointed to by the
        index register. The index register ends up pointing just past the
        last byte written. The register calculation is as follows:

           Bits:  15-12     11-8      7-4       3-0
                  unused    source     5         5

        The source field holds the number of the last register to store.
        For example, to store all of the V registers, it would contain 'F'.
        """
        cpu_source = self.cpu_x_index()
        cpu_index = self.cpu_registers['index']
        for cpu_counter in range(cpu_source + 1):
            self.cpu_memory[(cpu_index + cpu_counter) % MAX_MEMORY] = \
                    self.cpu_registers['v'][cpu_counter]
        self.cpu_registers['index'] = (cpu_index + cpu_source + 1) & WORD_MASK

    def cpu_read_regs_from_memory(self):
        """
        Fs65 - LOAD Vs, [I]

        Read the V registers V0 through Vs from the memory pointed to by the
        index register. The index register ends up pointing just past the
        last byte read. The register calculation is as follows:

           Bits:  15-12     11-8      7-4       3-0
                  unused    source     6         5
        """
        cpu_source = self.cpu_x_index()
        cpu_index = self.cpu_registers['index']
        for cpu_counter in range(cpu_source + 1):
            self.cpu_registers['v'][cpu_counter] = \
                    self.cpu_memory[(cpu_index + cpu_counter) % MAX_MEMORY]
        self.cpu_registers['index'] = (cpu_index + cpu_source + 1) & WORD_MASK

    def cpu_reset(self):
        """
        Reset the CPU by blanking out all registers, the stack, the screen and
        the keypad, then reloading the font and the ROM into fresh memory.
        """
        self.cpu_registers['v'] = [0] * NUM_REGISTERS
        self.cpu_registers['pc'] = PROGRAM_COUNTER_START
        self.cpu_registers['sp'] = 0
        self.cpu_registers['index'] = 0
        self.cpu_timers['delay'] = 0
        self.cpu_timers['sound'] = 0
        self.cpu_operand = 0
        self.cpu_stack = []
        self.cpu_memory = bytearray(MAX_MEMORY)
        self.cpu_memory[FONT_START:FONT_START + len(FONT_SPRITES)] = FONT_SPRITES
        self.cpu_memory[PROGRAM_COUNTER_START:PROGRAM_COUNTER_START + len(self.cpu_rom_data)] = \
            self.cpu_rom_data
        self.cpu_screen.clear_screen()
        self.cpu_keypad.release_all()

    def cpu_decrement_timers(self):
        """
        Decrement both the sound and delay timer. Neither goes below zero.
        """
        if self.cpu_timers['delay'] != 0:
            self.cpu_timers['delay'] -= 1

        if self.cpu_timers['sound'] != 0:
            self.cpu_timers['sound'] -= 1

    def cpu_should_play_sound(self):
        return self.cpu_timers['sound'] > 0

    def cpu_set_key(self, key_index, key_down):
        self.cpu_keypad.set_key(key_index, key_down)

    def cpu_read_framebuffer(self):
        return self.cpu_screen.get_framebuffer()
