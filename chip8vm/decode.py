"""CHIP-8 instruction decoding and classification."""

from enum import IntEnum

import numpy as np
from chex import dataclass


@dataclass(frozen=True)
class DecodedInstruction:
    """Decoded CHIP-8 instruction with extracted operands."""
    raw: int
    opcode: int  # First nibble
    x: int       # Second nibble (VX register)
    y: int       # Third nibble (VY register)
    n: int       # Fourth nibble (4-bit immediate)
    nn: int      # Last byte (8-bit immediate)
    nnn: int     # Last 12 bits (12-bit address)


def decode(instruction: int) -> DecodedInstruction:
    """Decode 16-bit instruction into components."""
    return DecodedInstruction(
        raw=instruction,
        opcode=(instruction & 0xF000) >> 12,
        x=(instruction & 0x0F00) >> 8,
        y=(instruction & 0x00F0) >> 4,
        n=instruction & 0x000F,
        nn=instruction & 0x00FF,
        nnn=instruction & 0x0FFF
    )


class Opcode(IntEnum):
    """Every instruction the interpreter understands, in dispatch-table order."""
    SYS = 0           # 0NNN
    CLS = 1           # 00E0
    RET = 2           # 00EE
    JP = 3            # 1NNN
    CALL = 4          # 2NNN
    SE_BYTE = 5       # 3XNN
    SNE_BYTE = 6      # 4XNN
    SE_REG = 7        # 5XY0
    LD_BYTE = 8       # 6XNN
    ADD_BYTE = 9      # 7XNN
    LD_REG = 10       # 8XY0
    OR = 11           # 8XY1
    AND = 12          # 8XY2
    XOR = 13          # 8XY3
    ADD_REG = 14      # 8XY4
    SUB = 15          # 8XY5
    SHR = 16          # 8XY6
    SUBN = 17         # 8XY7
    SHL = 18          # 8XYE
    SNE_REG = 19      # 9XY0
    LD_I = 20         # ANNN
    JP_V0 = 21        # BNNN
    RND = 22          # CXNN
    DRW = 23          # DXYN
    SKP = 24          # EX9E
    SKNP = 25         # EXA1
    LD_VX_DT = 26     # FX07
    LD_VX_K = 27      # FX0A
    LD_DT_VX = 28     # FX15
    LD_ST_VX = 29     # FX18
    ADD_I_VX = 30     # FX1E
    LD_F_VX = 31      # FX29
    LD_B_VX = 32      # FX33
    LD_I_VX = 33      # FX55
    LD_VX_I = 34      # FX65
    INVALID = 35


_FAMILY_OPCODES = {
    0x1: Opcode.JP,
    0x2: Opcode.CALL,
    0x3: Opcode.SE_BYTE,
    0x4: Opcode.SNE_BYTE,
    0x5: Opcode.SE_REG,
    0x6: Opcode.LD_BYTE,
    0x7: Opcode.ADD_BYTE,
    0x9: Opcode.SNE_REG,
    0xA: Opcode.LD_I,
    0xB: Opcode.JP_V0,
    0xC: Opcode.RND,
    0xD: Opcode.DRW,
}

_ALU_OPCODES = {
    0x0: Opcode.LD_REG,
    0x1: Opcode.OR,
    0x2: Opcode.AND,
    0x3: Opcode.XOR,
    0x4: Opcode.ADD_REG,
    0x5: Opcode.SUB,
    0x6: Opcode.SHR,
    0x7: Opcode.SUBN,
    0xE: Opcode.SHL,
}

_KEY_OPCODES = {
    0x9E: Opcode.SKP,
    0xA1: Opcode.SKNP,
}

_MISC_OPCODES = {
    0x07: Opcode.LD_VX_DT,
    0x0A: Opcode.LD_VX_K,
    0x15: Opcode.LD_DT_VX,
    0x18: Opcode.LD_ST_VX,
    0x1E: Opcode.ADD_I_VX,
    0x29: Opcode.LD_F_VX,
    0x33: Opcode.LD_B_VX,
    0x55: Opcode.LD_I_VX,
    0x65: Opcode.LD_VX_I,
}


def classify(instruction: int) -> Opcode:
    """Classify a 16-bit instruction word.

    The top nibble selects the family. Family 0 matches 00E0/00EE exactly and
    treats every other word as an ignored machine-code call. Families 8, E and F
    are further split on the low nibble or low byte; unknown sub-codes there are
    invalid.
    """
    family = (instruction & 0xF000) >> 12
    if family == 0x0:
        if instruction == 0x00E0:
            return Opcode.CLS
        if instruction == 0x00EE:
            return Opcode.RET
        return Opcode.SYS
    if family == 0x8:
        return _ALU_OPCODES.get(instruction & 0x000F, Opcode.INVALID)
    if family == 0xE:
        return _KEY_OPCODES.get(instruction & 0x00FF, Opcode.INVALID)
    if family == 0xF:
        return _MISC_OPCODES.get(instruction & 0x00FF, Opcode.INVALID)
    return _FAMILY_OPCODES[family]


# Classification of every possible word, for lookup from traced code
OPCODE_TABLE = np.array([classify(word) for word in range(0x10000)], dtype=np.int32)


_MNEMONICS = {
    Opcode.SYS: "SYS 0x{nnn:03X}",
    Opcode.CLS: "CLS",
    Opcode.RET: "RET",
    Opcode.JP: "JP 0x{nnn:03X}",
    Opcode.CALL: "CALL 0x{nnn:03X}",
    Opcode.SE_BYTE: "SE V{x:X}, 0x{nn:02X}",
    Opcode.SNE_BYTE: "SNE V{x:X}, 0x{nn:02X}",
    Opcode.SE_REG: "SE V{x:X}, V{y:X}",
    Opcode.LD_BYTE: "LD V{x:X}, 0x{nn:02X}",
    Opcode.ADD_BYTE: "ADD V{x:X}, 0x{nn:02X}",
    Opcode.LD_REG: "LD V{x:X}, V{y:X}",
    Opcode.OR: "OR V{x:X}, V{y:X}",
    Opcode.AND: "AND V{x:X}, V{y:X}",
    Opcode.XOR: "XOR V{x:X}, V{y:X}",
    Opcode.ADD_REG: "ADD V{x:X}, V{y:X}",
    Opcode.SUB: "SUB V{x:X}, V{y:X}",
    Opcode.SHR: "SHR V{x:X}",
    Opcode.SUBN: "SUBN V{x:X}, V{y:X}",
    Opcode.SHL: "SHL V{x:X}",
    Opcode.SNE_REG: "SNE V{x:X}, V{y:X}",
    Opcode.LD_I: "LD I, 0x{nnn:03X}",
    Opcode.JP_V0: "JP V0, 0x{nnn:03X}",
    Opcode.RND: "RND V{x:X}, 0x{nn:02X}",
    Opcode.DRW: "DRW V{x:X}, V{y:X}, {n}",
    Opcode.SKP: "SKP V{x:X}",
    Opcode.SKNP: "SKNP V{x:X}",
    Opcode.LD_VX_DT: "LD V{x:X}, DT",
    Opcode.LD_VX_K: "LD V{x:X}, K",
    Opcode.LD_DT_VX: "LD DT, V{x:X}",
    Opcode.LD_ST_VX: "LD ST, V{x:X}",
    Opcode.ADD_I_VX: "ADD I, V{x:X}",
    Opcode.LD_F_VX: "LD F, V{x:X}",
    Opcode.LD_B_VX: "LD B, V{x:X}",
    Opcode.LD_I_VX: "LD [I], V{x:X}",
    Opcode.LD_VX_I: "LD V{x:X}, [I]",
    Opcode.INVALID: "DATA 0x{raw:04X}",
}


def mnemonic(instruction: int) -> str:
    """Disassemble a single instruction word, e.g. ``LD V0, 0x0A``."""
    instruction = int(instruction)
    fields = decode(instruction)
    return _MNEMONICS[classify(instruction)].format(
        raw=fields.raw, x=fields.x, y=fields.y, n=fields.n, nn=fields.nn, nnn=fields.nnn
    )
