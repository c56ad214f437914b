"""Tests for the CPU core."""

import logging
import random

import pytest

from chip8.cpu import CPU, FONT_SPRITES, MAX_MEMORY, MAX_ROM_SIZE, PROGRAM_COUNTER_START
from chip8.exception import RomLoadException, StackOverflowException, StackUnderflowException


def registers(cpu):
    return cpu.cpu_registers['v']


class TestConstruction:

    def test_initial_state(self, cpu):
        assert cpu.cpu_registers['pc'] == 0x200
        assert cpu.cpu_registers['sp'] == 0
        assert cpu.cpu_registers['index'] == 0
        assert registers(cpu) == [0] * 16
        assert cpu.cpu_timers == {'delay': 0, 'sound': 0}
        assert len(cpu.cpu_memory) == MAX_MEMORY

    def test_font_is_loaded(self, make_cpu):
        cpu = make_cpu(0x1234, 0xABCD)
        assert len(FONT_SPRITES) == 80
        assert bytes(cpu.cpu_memory[0x000:0x050]) == FONT_SPRITES
        assert FONT_SPRITES[:5] == bytes([0xF0, 0x90, 0x90, 0x90, 0xF0])

    def test_program_is_loaded_at_0x200(self, make_cpu):
        cpu = make_cpu(0x1234, 0xABCD)
        assert bytes(cpu.cpu_memory[0x200:0x204]) == bytes([0x12, 0x34, 0xAB, 0xCD])
        assert cpu.cpu_memory[0x204] == 0

    def test_largest_rom_fits(self):
        cpu = CPU(bytes([0xAA]) * MAX_ROM_SIZE)
        assert MAX_ROM_SIZE == 4096 - 0x200
        assert cpu.cpu_memory[MAX_MEMORY - 1] == 0xAA

    def test_rom_too_large(self):
        with pytest.raises(RomLoadException) as error:
            CPU(bytes(MAX_ROM_SIZE + 1))
        assert error.value.rom_size == MAX_ROM_SIZE + 1

    def test_from_rom_file(self, tmp_path):
        rom_file = tmp_path / "test.ch8"
        rom_file.write_bytes(bytes([0x60, 0x2A]))
        cpu = CPU.from_rom_file(str(rom_file))
        cpu.cpu_execute_instruction()
        assert registers(cpu)[0] == 0x2A

    def test_reset_restores_start_state(self, make_cpu):
        cpu = make_cpu(0x6055, 0x2300)
        cpu.cpu_execute_instruction()
        cpu.cpu_execute_instruction()
        cpu.cpu_memory[0x200] = 0
        cpu.cpu_screen.set_screen_pixel(3, 3, 1)
        cpu.cpu_set_key(4, True)
        cpu.cpu_timers['delay'] = 9
        cpu.cpu_reset()
        assert cpu.cpu_registers['pc'] == PROGRAM_COUNTER_START
        assert cpu.cpu_registers['sp'] == 0
        assert cpu.cpu_stack == []
        assert registers(cpu)[0] == 0
        assert cpu.cpu_memory[0x200] == 0x60
        assert cpu.cpu_screen.get_screen_pixel(3, 3) == 0
        assert cpu.cpu_keypad.any_key_down() is None
        assert cpu.cpu_timers['delay'] == 0


class TestFlow:

    def test_fetch_advances_program_counter(self, make_cpu):
        cpu = make_cpu(0x6001)
        assert cpu.cpu_execute_instruction() == 0x6001
        assert cpu.cpu_registers['pc'] == 0x202

    def test_load_then_copy_register(self, make_cpu):
        cpu = make_cpu(0x60AA, 0x8010)
        cpu.cpu_execute_instruction()
        assert registers(cpu)[0] == 0xAA
        cpu.cpu_execute_instruction()
        assert registers(cpu)[0] == 0x00

    def test_clear_screen(self, make_cpu):
        cpu = make_cpu(0x00E0)
        cpu.cpu_screen.set_screen_pixel(1, 1, 1)
        cpu.cpu_execute_instruction()
        assert cpu.cpu_screen.get_screen_pixel(1, 1) == 0

    def test_jump(self, make_cpu):
        cpu = make_cpu(0x1345)
        cpu.cpu_execute_instruction()
        assert cpu.cpu_registers['pc'] == 0x345

    def test_call_and_return(self):
        rom = bytearray(0xABC - 0x200 + 2)
        rom[0:2] = bytes([0x2A, 0xBC])
        rom[0xABC - 0x200:] = bytes([0x00, 0xEE])
        cpu = CPU(rom)
        cpu.cpu_execute_instruction()
        assert cpu.cpu_registers['pc'] == 0xABC
        assert cpu.cpu_registers['sp'] == 1
        assert cpu.cpu_stack == [0x202]
        cpu.cpu_execute_instruction()
        assert cpu.cpu_registers['pc'] == 0x202
        assert cpu.cpu_registers['sp'] == 0

    def test_return_with_empty_stack(self, make_cpu):
        cpu = make_cpu(0x00EE)
        with pytest.raises(StackUnderflowException) as error:
            cpu.cpu_execute_instruction()
        assert error.value.program_counter == 0x200

    def test_call_with_full_stack(self, make_cpu):
        # Calls itself forever
        cpu = make_cpu(0x2200)
        for _ in range(16):
            cpu.cpu_execute_instruction()
        assert cpu.cpu_registers['sp'] == 16
        with pytest.raises(StackOverflowException):
            cpu.cpu_execute_instruction()
        assert cpu.cpu_registers['sp'] == 16

    def test_jump_plus_v0(self, cpu):
        registers(cpu)[0] = 0x04
        cpu.cpu_execute_opcode(0xB300)
        assert cpu.cpu_registers['pc'] == 0x304

    def test_machine_code_call_is_ignored(self, make_cpu):
        cpu = make_cpu(0x0123)
        cpu.cpu_execute_instruction()
        assert cpu.cpu_registers['pc'] == 0x202
        assert cpu.cpu_registers['sp'] == 0


class TestSkips:

    @pytest.mark.parametrize("operand, expected_pc", [
        (0x3000, 0x204),  # V0 == 0
        (0x3001, 0x202),
        (0x4001, 0x204),  # V0 != 1
        (0x4000, 0x202),
        (0x5010, 0x204),  # V0 == V1
        (0x9010, 0x202),  # V0 != V1
    ])
    def test_skip_distance(self, make_cpu, operand, expected_pc):
        cpu = make_cpu(operand)
        cpu.cpu_execute_instruction()
        assert cpu.cpu_registers['pc'] == expected_pc

    def test_no_skip_if_registers_differ(self, make_cpu):
        cpu = make_cpu(0x5010)
        registers(cpu)[1] = 1
        cpu.cpu_execute_instruction()
        assert cpu.cpu_registers['pc'] == 0x202

    def test_skip_if_registers_differ(self, make_cpu):
        cpu = make_cpu(0x9010)
        registers(cpu)[1] = 1
        cpu.cpu_execute_instruction()
        assert cpu.cpu_registers['pc'] == 0x204

    def test_register_skip_needs_zero_low_nibble(self, make_cpu):
        cpu = make_cpu(0x5011)
        cpu.cpu_execute_instruction()
        assert cpu.cpu_registers['pc'] == 0x202

    def test_skip_if_key_down(self, make_cpu):
        cpu = make_cpu(0xE09E)
        registers(cpu)[0] = 5
        cpu.cpu_set_key(5, True)
        cpu.cpu_execute_instruction()
        assert cpu.cpu_registers['pc'] == 0x204

    def test_skip_if_key_up(self, make_cpu):
        cpu = make_cpu(0xE0A1)
        registers(cpu)[0] = 5
        cpu.cpu_set_key(5, True)
        cpu.cpu_execute_instruction()
        assert cpu.cpu_registers['pc'] == 0x202

        cpu.cpu_reset()
        registers(cpu)[0] = 5
        cpu.cpu_execute_instruction()
        assert cpu.cpu_registers['pc'] == 0x204


class TestArithmetic:

    def test_add_value_wraps_without_flag(self, cpu):
        registers(cpu)[0] = 0xFF
        registers(cpu)[0xF] = 5
        cpu.cpu_execute_opcode(0x7002)
        assert registers(cpu)[0] == 0x01
        assert registers(cpu)[0xF] == 5

    def test_logical_operations(self, cpu):
        registers(cpu)[0] = 0b1100
        registers(cpu)[1] = 0b1010
        cpu.cpu_execute_opcode(0x8011)
        assert registers(cpu)[0] == 0b1110
        registers(cpu)[0] = 0b1100
        cpu.cpu_execute_opcode(0x8012)
        assert registers(cpu)[0] == 0b1000
        registers(cpu)[0] = 0b1100
        cpu.cpu_execute_opcode(0x8013)
        assert registers(cpu)[0] == 0b0110

    @pytest.mark.parametrize("vx, vy, result, flag", [
        (200, 100, 44, 1),
        (100, 100, 200, 0),
        (255, 1, 0, 1),
    ])
    def test_add_registers(self, cpu, vx, vy, result, flag):
        registers(cpu)[0] = vx
        registers(cpu)[1] = vy
        cpu.cpu_execute_opcode(0x8014)
        assert registers(cpu)[0] == result
        assert registers(cpu)[0xF] == flag

    @pytest.mark.parametrize("vx, vy, result, flag", [
        (5, 3, 2, 1),
        (5, 5, 0, 1),
        (3, 5, 254, 0),
    ])
    def test_subtract(self, cpu, vx, vy, result, flag):
        registers(cpu)[0] = vx
        registers(cpu)[1] = vy
        cpu.cpu_execute_opcode(0x8015)
        assert registers(cpu)[0] == result
        assert registers(cpu)[0xF] == flag

    @pytest.mark.parametrize("vx, vy, result, flag", [
        (3, 5, 2, 1),
        (5, 5, 0, 1),
        (5, 3, 254, 0),
    ])
    def test_reverse_subtract(self, cpu, vx, vy, result, flag):
        registers(cpu)[0] = vx
        registers(cpu)[1] = vy
        cpu.cpu_execute_opcode(0x8017)
        assert registers(cpu)[0] == result
        assert registers(cpu)[0xF] == flag

    def test_shift_right_uses_vy(self, cpu):
        registers(cpu)[0] = 0xFF
        registers(cpu)[1] = 0b101
        cpu.cpu_execute_opcode(0x8016)
        assert registers(cpu)[0] == 0b10
        assert registers(cpu)[0xF] == 1

    def test_shift_left_uses_vy(self, cpu):
        registers(cpu)[1] = 0x81
        cpu.cpu_execute_opcode(0x801E)
        assert registers(cpu)[0] == 0x02
        assert registers(cpu)[0xF] == 1

        registers(cpu)[1] = 0x40
        cpu.cpu_execute_opcode(0x801E)
        assert registers(cpu)[0] == 0x80
        assert registers(cpu)[0xF] == 0

    def test_flag_wins_when_target_is_vf(self, cpu):
        registers(cpu)[0xF] = 200
        registers(cpu)[1] = 100
        cpu.cpu_execute_opcode(0x8F14)
        assert registers(cpu)[0xF] == 1

    def test_random_is_masked_and_seeded(self):
        first = CPU(rng=random.Random(42))
        second = CPU(rng=random.Random(42))
        expected = random.Random(42).randint(0, 255) & 0x0F
        first.cpu_execute_opcode(0xC30F)
        second.cpu_execute_opcode(0xC30F)
        assert registers(first)[3] == expected
        assert registers(second)[3] == expected


class TestIndexAndMemory:

    def test_load_index(self, cpu):
        cpu.cpu_execute_opcode(0xA123)
        assert cpu.cpu_registers['index'] == 0x123

    def test_add_to_index_wraps(self, cpu):
        cpu.cpu_registers['index'] = 0xFFFF
        registers(cpu)[0] = 2
        registers(cpu)[0xF] = 7
        cpu.cpu_execute_opcode(0xF01E)
        assert cpu.cpu_registers['index'] == 0x0001
        assert registers(cpu)[0xF] == 7

    def test_font_glyph_address(self, cpu):
        registers(cpu)[0] = 0xA
        cpu.cpu_execute_opcode(0xF029)
        assert cpu.cpu_registers['index'] == 50
        assert bytes(cpu.cpu_memory[50:55]) == bytes([0xF0, 0x90, 0xF0, 0x90, 0x90])

    @pytest.mark.parametrize("value, digits", [
        (123, [1, 2, 3]),
        (7, [0, 0, 7]),
        (255, [2, 5, 5]),
        (40, [0, 4, 0]),
    ])
    def test_bcd(self, cpu, value, digits):
        registers(cpu)[4] = value
        cpu.cpu_registers['index'] = 0x300
        cpu.cpu_execute_opcode(0xF433)
        assert list(cpu.cpu_memory[0x300:0x303]) == digits
        assert cpu.cpu_registers['index'] == 0x300

    def test_store_and_load_registers(self, cpu):
        registers(cpu)[0:4] = [1, 2, 3, 4]
        registers(cpu)[4] = 99
        cpu.cpu_registers['index'] = 0x300
        cpu.cpu_execute_opcode(0xF355)
        assert list(cpu.cpu_memory[0x300:0x305]) == [1, 2, 3, 4, 0]
        assert cpu.cpu_registers['index'] == 0x304

        registers(cpu)[0:4] = [0, 0, 0, 0]
        cpu.cpu_registers['index'] = 0x300
        cpu.cpu_execute_opcode(0xF365)
        assert registers(cpu)[0:5] == [1, 2, 3, 4, 99]
        assert cpu.cpu_registers['index'] == 0x304


class TestDraw:

    def test_draw_sets_pixels_then_collides(self, cpu):
        # I points at the glyph for 0, V0 = V1 = 0
        cpu.cpu_execute_opcode(0xD015)
        assert cpu.cpu_screen.get_screen_pixel(0, 0) == 1
        assert cpu.cpu_screen.get_screen_pixel(4, 0) == 0
        assert registers(cpu)[0xF] == 0

        cpu.cpu_execute_opcode(0xD015)
        assert registers(cpu)[0xF] == 1
        assert cpu.cpu_read_framebuffer() == CPU().cpu_read_framebuffer()

    def test_draw_wraps_around(self, cpu):
        registers(cpu)[0] = 62
        registers(cpu)[1] = 31
        cpu.cpu_registers['index'] = 0x300
        cpu.cpu_memory[0x300] = 0xF0
        cpu.cpu_memory[0x301] = 0x80
        cpu.cpu_execute_opcode(0xD012)
        screen = cpu.cpu_screen
        assert [screen.get_screen_pixel(x, 31) for x in (62, 63, 0, 1, 2)] == [1, 1, 1, 1, 0]
        assert screen.get_screen_pixel(62, 0) == 1
        assert screen.get_screen_pixel(63, 0) == 0

    def test_framebuffer_is_a_snapshot(self, cpu):
        before = cpu.cpu_read_framebuffer()
        cpu.cpu_execute_opcode(0xD015)
        assert before[0][0] == 0
        assert cpu.cpu_read_framebuffer()[0][0] == 1
        assert len(before) == 32
        assert all(len(row) == 64 for row in before)


class TestKeysAndTimers:

    def test_wait_for_key_blocks(self, make_cpu):
        cpu = make_cpu(0xF20A)
        for _ in range(3):
            cpu.cpu_execute_instruction()
            assert cpu.cpu_registers['pc'] == 0x200
        cpu.cpu_set_key(7, True)
        cpu.cpu_set_key(3, True)
        cpu.cpu_execute_instruction()
        assert registers(cpu)[2] == 3
        assert cpu.cpu_registers['pc'] == 0x202

    def test_wait_for_key_logs_pressed_key(self, make_cpu, caplog):
        cpu = make_cpu(0xF20A)
        cpu.cpu_set_key(0xB, True)
        with caplog.at_level(logging.DEBUG, logger='chip8.cpu'):
            cpu.cpu_execute_instruction()
        assert "Key B pressed, wait at 0200 done" in caplog.text

    def test_delay_timer(self, cpu):
        registers(cpu)[0] = 3
        cpu.cpu_execute_opcode(0xF015)
        cpu.cpu_decrement_timers()
        cpu.cpu_execute_opcode(0xF107)
        assert registers(cpu)[1] == 2
        for _ in range(5):
            cpu.cpu_decrement_timers()
        assert cpu.cpu_timers['delay'] == 0

    def test_sound_timer(self, cpu):
        assert not cpu.cpu_should_play_sound()
        registers(cpu)[0] = 1
        cpu.cpu_execute_opcode(0xF018)
        assert cpu.cpu_should_play_sound()
        cpu.cpu_decrement_timers()
        assert not cpu.cpu_should_play_sound()
        cpu.cpu_decrement_timers()
        assert cpu.cpu_timers['sound'] == 0


class TestUnknownOperands:

    @pytest.mark.parametrize("operand", [0xE000, 0xF0FF, 0x8008, 0x00E1])
    def test_unknown_operand_is_ignored(self, make_cpu, operand):
        cpu = make_cpu(operand)
        cpu.cpu_execute_instruction()
        assert cpu.cpu_registers['pc'] == 0x202
        assert registers(cpu) == [0] * 16
        assert cpu.cpu_registers['index'] == 0

    def test_dump(self, make_cpu):
        cpu = make_cpu(0x6A12)
        cpu.cpu_execute_instruction()
        dump = str(cpu)
        assert 'PC:  202  OP: 6A12' in dump
        assert 'VA: 12' in dump
