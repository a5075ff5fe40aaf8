"""Parsing of the two word lists the game runs on.

Target list: one word per line, most common first; only the first
comma-separated field is used and the line position becomes the word's
rank. Dictionary: one word per line, any order.
"""

import re
from pathlib import Path
from typing import FrozenSet, Iterable, List, Optional, Tuple

from scramble.services.rounds.catalog import TargetWordEntry, WordCatalog

_WORD_RE = re.compile(r'^[A-Z]+$')
HEADER_WORD = 'WORD'
MIN_WORD_LEN = 3
FOUR_LETTER_RANK_LIMIT = 2000
LONG_WORD_RANK_LIMIT = 5000

# three-letter words common enough to be fair targets
SAFE_TRIPLETS = frozenset("""
ACT ADD AGE AGO AID AIM AIR ALL AND ANY APE APT ARC ARE ARM ART ASH ASK ATE AWE AXE
BAD BAG BAN BAR BAT BAY BED BEE BEG BET BIB BID BIG BIN BIT BOA BOB BOG BOO BOW BOX BOY BRA BUD BUG BUN BUS BUT BUY BYE
CAB CAD CAM CAN CAP CAR CAT COD COG CON COP COT COW COY CRY CUB CUE CUP CUT
DAB DAD DAM DAY DEN DEW DID DIE DIG DIM DIN DIP DOG DON DOT DRY DUB DUO DYE
EAR EAT EGG EGO ELF ELK ELM END ERA EVE EYE
FAN FAR FAT FED FEE FEW FIB FIG FIN FIT FIX FLU FLY FOB FOG FOR FOX FRY FUN FUR
GAG GAP GAS GEL GEM GET GIG GIN GOD GOT GUM GUN GUT GUY GYM
HAD HAM HAS HAT HAY HEM HEN HER HEY HID HIM HIP HIT HOG HOP HOT HOW HUB HUG HUM HUT
ICE ICY ILL INK INN ION IRE ITS IVY
JAM JAR JAW JAY JET JIG JOB JOG JOY JUG
KEY KID KIN KIT
LAB LAD LAG LAP LAW LAY LED LEG LET LID LIE LIP LIT LOG LOT LOW
MAD MAN MAP MAT MAY MEN MET MID MIX MOB MOM MOP MUD MUG MUM
NAB NAG NAP NET NEW NIL NIP NOD NOR NOT NOW NUT
OAK OAR ODD OFF OIL OLD ONE ORB OUR OUT OWL OWN
PAD PAL PAN PAR PAT PAW PAY PEA PEG PEN PET PIE PIG PIN PIT PLY POD POP POT PRO PRY PUB PUN PUP PUT
RAG RAM RAN RAP RAT RAW RAY RED RIB RID RIG RIM RIP ROB ROD ROT ROW RUB RUG RUN RUT
SAD SAG SAW SAY SEA SEE SET SEW SEX SHE SHY SIN SIP SIR SIT SIX SKI SKY SLY SOB SOD SON SOW SOY SPA SPY SUM SUN
TAB TAG TAN TAP TAR TEA TEN THE TIE TIN TIP TOE TON TOP TOW TOY TRY TUB TUG TWO
URN USE
VAN VAT VET VIA VIE VIP VOW
WAG WAR WAX WAY WEB WED WET WHO WHY WIG WIN WIT WOE WON WOW
YAK YAM YES YET YOU
ZAP ZIP ZOO
""".split())

FALLBACK_TARGETS: Tuple[TargetWordEntry, ...] = (
    TargetWordEntry('STREAM', 0, True),
    TargetWordEntry('MASTER', 1, True),
    TargetWordEntry('GAMING', 2, True),
    TargetWordEntry('PLAYER', 3, True),
)


def _clean(raw: str) -> Optional[str]:
    word = raw.strip().upper()
    if len(word) < MIN_WORD_LEN or not _WORD_RE.match(word):
        return None
    return word


def is_eligible(word: str, rank: int) -> bool:
    if len(word) == 3:
        return word in SAFE_TRIPLETS
    if len(word) == 4:
        return rank <= FOUR_LETTER_RANK_LIMIT
    return rank <= LONG_WORD_RANK_LIMIT


def parse_target_lines(lines: Iterable[str]) -> WordCatalog:
    entries: List[TargetWordEntry] = []
    for index, line in enumerate(lines):
        word = _clean(line.split(',', 1)[0])
        if word is None or word == HEADER_WORD:
            continue
        entries.append(TargetWordEntry(word=word, rank=index, eligible=is_eligible(word, index)))
    return WordCatalog.from_entries(entries)


def parse_dictionary_lines(lines: Iterable[str]) -> FrozenSet[str]:
    return frozenset(w for w in (_clean(line) for line in lines) if w)


def fallback_word_lists() -> Tuple[WordCatalog, FrozenSet[str]]:
    return WordCatalog.from_entries(FALLBACK_TARGETS), frozenset(e.word for e in FALLBACK_TARGETS)


def load_word_lists(targets_path=None, dictionary_path=None) -> Tuple[WordCatalog, FrozenSet[str]]:
    """Read both lists from disk, or use the fallback pair if neither is set."""
    if not targets_path and not dictionary_path:
        return fallback_word_lists()
    if not (targets_path and dictionary_path):
        raise ValueError('TARGETS_PATH and DICTIONARY_PATH must be set together')
    with open(Path(targets_path), 'r', encoding='utf-8') as f:
        catalog = parse_target_lines(f.read().splitlines())
    with open(Path(dictionary_path), 'r', encoding='utf-8') as f:
        dictionary = parse_dictionary_lines(f.read().splitlines())
    return catalog, dictionary
