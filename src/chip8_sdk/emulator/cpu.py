"""
CHIP-8 Interpreter Core
=======================

Fetch-decode-execute engine for the CHIP-8 instruction set.

Each call to ``execute_one()``:

1. Fetches the big-endian word at PC.
2. Splits it into op (bits 15-12), x (11-8), y (7-4), n (3-0),
   kk (7-0) and nnn (11-0).
3. Decrements the delay and sound timers if they are nonzero. Timers
   tick once per executed instruction; the host decides how many
   instructions run per second.
4. Executes the instruction.
5. Advances PC by 2, unless the instruction set PC itself (jumps, calls,
   returns, skips, and a key wait with no key pressed).

VF (register 15) is both a general-purpose register and the flag
register. Arithmetic instructions compute the flag from the original
operands and write it first, then store the result; with x = F the
result is what remains.

The interpreter talks to the outside world through two small protocols,
DisplaySurface and InputSurface. It never sleeps, never blocks, and
performs no I/O of its own.

Fatal conditions (unknown opcode, stack overflow, stack underflow) raise
EmulatorError subclasses. After one of these, PC still points at the
faulting instruction.
"""

import random
from dataclasses import dataclass, field
from typing import List, Optional, Protocol

from chip8_sdk.cpu.chip8 import (
    DISPLAY_HEIGHT,
    DISPLAY_WIDTH,
    FLAG_REGISTER,
    NUM_REGISTERS,
    PROGRAM_START,
    STACK_DEPTH,
    font_address,
)
from chip8_sdk.emulator.memory import Memory
from chip8_sdk.errors import StackOverflowError, StackUnderflowError, UnknownOpcodeError


# =============================================================================
# Collaborator Protocols
# =============================================================================

class DisplaySurface(Protocol):
    """What the interpreter needs from a display."""

    def clear(self) -> None:
        """Switch every pixel off."""
        ...

    def toggle_pixel(self, x: int, y: int) -> bool:
        """
        XOR a pixel; return True if it was on (collision).

        The interpreter wraps coordinates itself, so x is always 0-63 and
        y is always 0-31.
        """
        ...


class InputSurface(Protocol):
    """What the interpreter needs from a keypad."""

    def is_key_down(self, code: int) -> bool:
        ...

    def poll_key_event(self) -> Optional[int]:
        """Return the next pending key press, or None without waiting."""
        ...


# =============================================================================
# CPU State
# =============================================================================

@dataclass
class CPUState:
    """
    Complete register state for snapshotting.

    Attributes:
        v: General registers V0-VF
        i: Index register
        pc: Program counter
        sp: Number of return addresses on the stack (0-16)
        stack: Return address slots
        dt: Delay timer
        st: Sound timer
    """
    v: List[int] = field(default_factory=lambda: [0] * NUM_REGISTERS)
    i: int = 0
    pc: int = PROGRAM_START
    sp: int = 0
    stack: List[int] = field(default_factory=lambda: [0] * STACK_DEPTH)
    dt: int = 0
    st: int = 0


# =============================================================================
# Interpreter
# =============================================================================

class Chip8CPU:
    """
    CHIP-8 interpreter.

    Attributes:
        memory: The 4 KiB memory (font already loaded)
        v: General registers V0-VF (bytearray, so values stay 0-255)
        stack: Return address slots

    Example:
        >>> from chip8_sdk.emulator import Display, Keyboard, Memory
        >>> mem = Memory()
        >>> mem.load(bytes([0x63, 0x07]))      # ld v3, 7
        >>> cpu = Chip8CPU(mem, Display(), Keyboard())
        >>> cpu.execute_one()
        25351
        >>> cpu.v[3], hex(cpu.pc)
        (7, '0x202')
    """

    def __init__(
        self,
        memory: Memory,
        display: DisplaySurface,
        keyboard: InputSurface,
        rng: Optional[random.Random] = None,
    ):
        self.memory = memory
        self._display = display
        self._keyboard = keyboard
        self._rng = rng or random.Random()

        self.v = bytearray(NUM_REGISTERS)
        self.stack: List[int] = [0] * STACK_DEPTH
        self._i = 0
        self._pc = PROGRAM_START
        self._sp = 0
        self._dt = 0
        self._st = 0

    # =========================================================================
    # Register Properties
    # =========================================================================

    @property
    def i(self) -> int:
        """Index register (16-bit)."""
        return self._i

    @i.setter
    def i(self, value: int) -> None:
        self._i = value & 0xFFFF

    @property
    def pc(self) -> int:
        """Program counter (16-bit)."""
        return self._pc

    @pc.setter
    def pc(self, value: int) -> None:
        self._pc = value & 0xFFFF

    @property
    def sp(self) -> int:
        """Stack pointer: number of return addresses currently stacked."""
        return self._sp

    @property
    def dt(self) -> int:
        """Delay timer."""
        return self._dt

    @dt.setter
    def dt(self, value: int) -> None:
        self._dt = value & 0xFF

    @property
    def st(self) -> int:
        """Sound timer. The buzzer sounds while it is nonzero."""
        return self._st

    @st.setter
    def st(self, value: int) -> None:
        self._st = value & 0xFF

    @property
    def vf(self) -> int:
        return self.v[FLAG_REGISTER]

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def reset(self) -> None:
        """
        Reset registers to power-on state.

        Memory is not touched; reset it separately to drop the program.
        """
        self.v[:] = bytes(NUM_REGISTERS)
        self.stack = [0] * STACK_DEPTH
        self._i = 0
        self._pc = PROGRAM_START
        self._sp = 0
        self._dt = 0
        self._st = 0

    def get_state(self) -> CPUState:
        return CPUState(
            v=list(self.v),
            i=self._i,
            pc=self._pc,
            sp=self._sp,
            stack=list(self.stack),
            dt=self._dt,
            st=self._st,
        )

    def set_state(self, state: CPUState) -> None:
        self.v[:] = bytes(state.v)
        self.i = state.i
        self.pc = state.pc
        self._sp = state.sp
        self.stack = list(state.stack)
        self.dt = state.dt
        self.st = state.st

    # =========================================================================
    # Stack
    # =========================================================================

    def _push(self, address: int, opcode: int) -> None:
        if self._sp >= STACK_DEPTH:
            raise StackOverflowError(pc=self._pc, opcode=opcode)
        self.stack[self._sp] = address
        self._sp += 1

    def _pop(self, opcode: int) -> int:
        if self._sp == 0:
            raise StackUnderflowError(pc=self._pc, opcode=opcode)
        self._sp -= 1
        return self.stack[self._sp]

    # =========================================================================
    # Execution
    # =========================================================================

    def execute_one(self) -> int:
        """
        Execute a single instruction.

        Returns:
            The instruction word that was executed

        Raises:
            UnknownOpcodeError: The word at PC is not an instruction
            StackOverflowError: call with 16 return addresses stacked
            StackUnderflowError: ret with an empty stack
        """
        opcode = self.memory.read_word(self._pc)

        if self._dt > 0:
            self._dt -= 1
        if self._st > 0:
            self._st -= 1

        self.pc = self._execute_instruction(opcode)
        return opcode

    def _execute_instruction(self, opcode: int) -> int:
        """
        Execute one decoded instruction.

        Returns:
            The address of the next instruction
        """
        x = (opcode >> 8) & 0xF
        y = (opcode >> 4) & 0xF
        n = opcode & 0xF
        kk = opcode & 0xFF
        nnn = opcode & 0xFFF

        v = self.v
        pc = self._pc
        next_pc = pc + 2

        match opcode >> 12:
            # ============================================
            # 0nnn: screen and subroutine return
            # ============================================
            case 0x0:
                if opcode == 0x00E0:  # CLS
                    self._display.clear()
                elif opcode == 0x00EE:  # RET
                    return self._pop(opcode)
                else:
                    raise UnknownOpcodeError(opcode, pc)

            case 0x1:  # JP nnn
                return nnn

            case 0x2:  # CALL nnn
                self._push(next_pc, opcode)
                return nnn

            case 0x3:  # SE Vx, kk
                if v[x] == kk:
                    next_pc += 2

            case 0x4:  # SNE Vx, kk
                if v[x] != kk:
                    next_pc += 2

            case 0x5:  # SE Vx, Vy
                if n != 0:
                    raise UnknownOpcodeError(opcode, pc)
                if v[x] == v[y]:
                    next_pc += 2

            case 0x6:  # LD Vx, kk
                v[x] = kk

            case 0x7:  # ADD Vx, kk (no flag)
                v[x] = (v[x] + kk) & 0xFF

            case 0x8:
                self._execute_alu(opcode, x, y, n)

            case 0x9:
                match n:
                    case 0x0:  # SNE Vx, Vy
                        if v[x] != v[y]:
                            next_pc += 2
                    # Comparison extension: result in VF, no skip
                    case 0x1:  # GT
                        v[FLAG_REGISTER] = 1 if v[x] > v[y] else 0
                    case 0x2:  # GTE
                        v[FLAG_REGISTER] = 1 if v[x] >= v[y] else 0
                    case 0x3:  # LT
                        v[FLAG_REGISTER] = 1 if v[x] < v[y] else 0
                    case 0x4:  # LTE
                        v[FLAG_REGISTER] = 1 if v[x] <= v[y] else 0
                    case _:
                        raise UnknownOpcodeError(opcode, pc)

            case 0xA:  # LDI nnn
                self.i = nnn

            case 0xB:  # JP V0, nnn
                return v[0] + nnn

            case 0xC:  # RND Vx, kk
                v[x] = self._rng.randrange(256) & kk

            case 0xD:  # DRW Vx, Vy, n
                self._draw_sprite(v[x], v[y], n)

            case 0xE:
                if kk == 0x9E:  # SKP Vx
                    if self._keyboard.is_key_down(v[x]):
                        next_pc += 2
                elif kk == 0xA1:  # SKNP Vx
                    if not self._keyboard.is_key_down(v[x]):
                        next_pc += 2
                else:
                    raise UnknownOpcodeError(opcode, pc)

            case 0xF:
                match kk:
                    case 0x07:  # LD Vx, DT
                        v[x] = self._dt
                    case 0x0A:  # GETKEY Vx
                        key = self._keyboard.poll_key_event()
                        if key is None:
                            # Spin: execute this instruction again next step
                            return pc
                        v[x] = key & 0xFF
                    case 0x15:  # LD DT, Vx
                        self._dt = v[x]
                    case 0x18:  # LD ST, Vx
                        self._st = v[x]
                    case 0x1E:  # ADDI Vx
                        self.i = self._i + v[x]
                    case 0x29:  # LDSPRT Vx
                        self.i = font_address(v[x])
                    case 0x33:  # LDBCD Vx
                        value = v[x]
                        self.memory.write(self._i, value // 100)
                        self.memory.write(self._i + 1, (value // 10) % 10)
                        self.memory.write(self._i + 2, value % 10)
                    case 0x55:  # DUMPREG Vx
                        for r in range(x + 1):
                            self.memory.write(self._i + r, v[r])
                    case 0x65:  # LDREG Vx
                        for r in range(x + 1):
                            v[r] = self.memory.read(self._i + r)
                    case _:
                        raise UnknownOpcodeError(opcode, pc)

        return next_pc

    def _execute_alu(self, opcode: int, x: int, y: int, n: int) -> None:
        """Register-register operations (8xyN)."""
        v = self.v
        vx = v[x]
        vy = v[y]

        match n:
            case 0x0:  # LD Vx, Vy
                v[x] = vy
            case 0x1:  # OR
                v[x] = vx | vy
            case 0x2:  # AND
                v[x] = vx & vy
            case 0x3:  # XOR
                v[x] = vx ^ vy
            case 0x4:  # ADD: VF = carry
                v[FLAG_REGISTER] = 1 if vx + vy > 0xFF else 0
                v[x] = (vx + vy) & 0xFF
            case 0x5:  # SUB: VF = not borrow
                v[FLAG_REGISTER] = 1 if vx > vy else 0
                v[x] = (vx - vy) & 0xFF
            case 0x6:  # SHR: VF = bit shifted out
                v[FLAG_REGISTER] = vx & 0x01
                v[x] = vx >> 1
            case 0x7:  # SUBN: VF = not borrow
                v[FLAG_REGISTER] = 1 if vy > vx else 0
                v[x] = (vy - vx) & 0xFF
            case 0xE:  # SHL: VF = bit shifted out
                v[FLAG_REGISTER] = (vx >> 7) & 0x01
                v[x] = (vx << 1) & 0xFF
            case _:
                raise UnknownOpcodeError(opcode, self._pc)

    def _draw_sprite(self, x: int, y: int, height: int) -> None:
        """
        XOR an 8-pixel-wide sprite from memory[I] onto the display.

        Pixels wrap at the screen edges. VF is set to 1 if any lit pixel
        was switched off, otherwise 0.
        """
        collision = False
        for row in range(height):
            bits = self.memory.read(self._i + row)
            for col in range(8):
                if bits & (0x80 >> col):
                    if self._display.toggle_pixel((x + col) % DISPLAY_WIDTH, (y + row) % DISPLAY_HEIGHT):
                        collision = True
        self.v[FLAG_REGISTER] = 1 if collision else 0
