# Bit masks used to pull the fields out of a 16-bit Chip 8 operand. An
# operand is laid out as follows:
#
#    Bits:  15-12     11-8      7-4       3-0
#           family      x         y         n
#
# with nn covering bits 7-0 and nnn covering bits 11-0.

FAMILY_MASK = 0xF000
FAMILY_SHIFT = 12

X_MASK = 0x0F00
X_SHIFT = 8

Y_MASK = 0x00F0
Y_SHIFT = 4

N_MASK = 0x000F
NN_MASK = 0x00FF
NNN_MASK = 0x0FFF

# Register values are 8 bits wide, addresses 16 bits wide
BYTE_MASK = 0xFF
WORD_MASK = 0xFFFF

BIT_ZERO = 0x01
BIT_SEVEN = 0x80
