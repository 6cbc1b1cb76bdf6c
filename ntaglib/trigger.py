"""Software-trigger emulation: hit digitisation and main-trigger selection."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import IntEnum

COUNT_PER_NSEC = 1.92
TIME_OFFSET = 1024.0 * 32.0 / COUNT_PER_NSEC

PC2PE_MC = 2.465
CNT2PC_S = 0.100
CNT2PC_M = 0.732
CNT2PC_L = 5.141

QBEE_QTC_SMALL = 0
QBEE_QTC_MEDIUM = 1
QBEE_QTC_LARGE = 2
IQ_INGATE_FLAG = 2048

SWTRG_SAME_GATE_WIDTH = 768
SAME_TRIGGER_WINDOW = 384  # 200 ns at 1.92 counts/ns
GATE_START = -1000
GATE_END = 1496
MAX_TRIGGER_OFFSETS = 10


class TriggerId(IntEnum):
    """Software trigger types (bit positions in the trigger word)."""

    SW_LE = 0
    SW_HE = 1
    SW_SLE = 2
    SW_OD = 3
    SHE = 28
    AFT = 29


_PRIMARY_TYPES = frozenset({TriggerId.SW_LE, TriggerId.SW_HE, TriggerId.SHE, TriggerId.SW_OD})
_COINCIDENT_TYPES = _PRIMARY_TYPES | {TriggerId.SW_SLE}


def _int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - (1 << 32) if value >= (1 << 31) else value


@dataclass(frozen=True)
class RawHit:
    """A digitised hit: time counter, charge word and cable word."""

    t: int
    q: int
    cable: int


@dataclass(frozen=True)
class SoftwareTrigger:
    """One entry of the software trigger table."""

    trigger_type: int
    t0_counter: int


@dataclass(frozen=True)
class SubTrigger:
    """Recorded trigger information."""

    type_bit: int
    time: int
    time_rel: float
    index: int


@dataclass(frozen=True)
class TriggerDecision:
    """The selected main trigger and its combined trigger word."""

    primary_index: int
    it0sk: int
    idtgsk: int
    sub_triggers: list[SubTrigger] = field(default_factory=list)


def digitize_hit(pmt_id: int, t: float, q: float, t_offset: float = TIME_OFFSET) -> RawHit:
    """Digitise a hit time (ns) and charge (p.e.) into raw QBee words."""
    i_t = _int32(int((t + t_offset) * COUNT_PER_NSEC))

    q_small = int(q * PC2PE_MC / CNT2PC_S) + 961
    q_medium = int(q * PC2PE_MC / CNT2PC_M) + 961
    q_large = int(q * PC2PE_MC / CNT2PC_L) + 961

    gain, q_tmp = QBEE_QTC_SMALL, q_small
    if q_small >= 1350:
        gain, q_tmp = QBEE_QTC_MEDIUM, q_medium
    if q_medium >= 2047:
        gain, q_tmp = QBEE_QTC_LARGE, q_large
    i_q = q_tmp + gain * (1 << 14) + IQ_INGATE_FLAG

    i_w = (i_q >> 11) & 0x3E
    cable = (pmt_id & 0xFFFF) | ((i_w & 0xFFFF) << 16)
    return RawHit(i_t, i_q, _int32(cable))


def gate_hit(
    t: float, flag: int, it0sk: int, t_offset: float = TIME_OFFSET
) -> tuple[float, int]:
    """Flag a hit inside the 1.3 us gate around it0sk and shift its time.

    Returns the shifted time and the new flag word, whose lowest bit is set
    only for hits inside the gate.
    """
    flag &= 0xFFFE
    i_t = _int32(int((t + t_offset) * COUNT_PER_NSEC))
    if GATE_START + it0sk < i_t < GATE_END + it0sk:
        flag |= 1
    shifted = t + (-it0sk / COUNT_PER_NSEC) + t_offset + 1000.0
    return shifted, flag


def _enabled(trigger: SoftwareTrigger, types: frozenset, mask: int) -> bool:
    return trigger.trigger_type in types and bool(mask & (1 << trigger.trigger_type))


class TriggerManager:
    """Builds raw hit lists and picks the main software trigger."""

    def __init__(self) -> None:
        self.raw_hits: list[RawHit] = []
        self.sub_triggers: list[SubTrigger] = []
        self.it0sk = 0
        self.idtgsk = 0

    def make_tqraw(
        self, pmt_id: int, t: float, q: float, t_offset: float = TIME_OFFSET
    ) -> RawHit:
        """Digitise a hit and append it to the raw hit list."""
        raw = digitize_hit(pmt_id, t, q, t_offset)
        self.raw_hits.append(raw)
        return raw

    def find_main_trigger(
        self,
        triggers: Sequence[SoftwareTrigger],
        t_offset: float = TIME_OFFSET,
        mask: int = -1,
    ) -> TriggerDecision:
        """Select the earliest enabled trigger and combine coincident ones."""
        found = False
        primary = -1
        it0sk = 0
        idtgsk = 0

        for index, trig in enumerate(triggers):
            if not _enabled(trig, _PRIMARY_TYPES, mask):
                continue
            if not found or trig.t0_counter <= it0sk:
                found = True
                primary = index
                it0sk = trig.t0_counter
                idtgsk = 1 << trig.trigger_type

        for index, trig in enumerate(triggers):
            if not _enabled(trig, _COINCIDENT_TYPES, mask):
                continue
            if not found:
                found = True
                primary = index
                it0sk = trig.t0_counter
                idtgsk = 1 << trig.trigger_type
            if abs(trig.t0_counter - it0sk) < SAME_TRIGGER_WINDOW:
                idtgsk |= 1 << trig.trigger_type

        if not found:
            it0sk = 0
            idtgsk = 0

        primary_bit = 1 << triggers[primary].trigger_type if primary != -1 else 0
        subs = [SubTrigger(primary_bit, it0sk, it0sk / COUNT_PER_NSEC - t_offset, primary)]

        if primary != -1:
            for index, trig in enumerate(triggers):
                if index != primary and abs(it0sk - trig.t0_counter) < SWTRG_SAME_GATE_WIDTH:
                    idtgsk |= 1 << trig.trigger_type

        subs.extend(
            SubTrigger(
                1 << trig.trigger_type,
                trig.t0_counter,
                trig.t0_counter / COUNT_PER_NSEC - t_offset,
                index,
            )
            for index, trig in enumerate(triggers)
        )

        self.sub_triggers = subs
        self.it0sk = it0sk
        self.idtgsk = idtgsk
        return TriggerDecision(primary, it0sk, idtgsk, list(subs))

    def trigger_offsets(self) -> list[tuple[int, int, float, int]]:
        """MC trigger records (bit, counter, pre-t0 in ns, index), at most ten."""
        return [
            (
                sub.type_bit,
                sub.time,
                sub.time_rel - 1000.0 + 500.0 / COUNT_PER_NSEC,
                sub.index,
            )
            for sub in self.sub_triggers[:MAX_TRIGGER_OFFSETS]
        ]