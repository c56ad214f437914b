class Chip8Exception(Exception):
    """
    Base class for all the errors raised by the emulator.
    """


class RomLoadException(Chip8Exception):
    """
    A class to raise when a ROM does not fit in the program memory.
    """
    def __init__(self, rom_size, max_size):
        Chip8Exception.__init__(
            self, "ROM is {} bytes, only {} bytes fit in memory".format(rom_size, max_size))
        self.rom_size = rom_size
        self.max_size = max_size


class StackOverflowException(Chip8Exception):
    """
    A class to raise when a subroutine call is made with a full stack.
    """
    def __init__(self, program_counter):
        Chip8Exception.__init__(
            self, "Stack overflow on call at {:04X}".format(program_counter))
        self.program_counter = program_counter


class StackUnderflowException(Chip8Exception):
    """
    A class to raise when returning from a subroutine with an empty stack.
    """
    def __init__(self, program_counter):
        Chip8Exception.__init__(
            self, "Stack underflow on return at {:04X}".format(program_counter))
        self.program_counter = program_counter


class ConfigException(Chip8Exception):
    """
    A class to raise for invalid configuration values.
    """
    def __init__(self, key, value):
        Chip8Exception.__init__(
            self, "Invalid configuration value for '{}': {!r}".format(key, value))
        self.key = key
        self.value = value
