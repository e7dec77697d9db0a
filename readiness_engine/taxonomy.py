"""
Revised Bloom's Taxonomy Grid.

The skill grid is fixed: 6 cognitive process levels (Remember -> Create)
crossed with 4 knowledge types (Factual -> Metacognitive). Each of the 24
cells is identified by a code such as "1A" or "6D".

Design:
- CognitiveLevel / KnowledgeType: Enums for the two axes
- TaxonomyCell: Immutable description of one cell
- cell_code / parse_cell_code: Pure code formatting and parsing
- summarize_levels: Roll cell mastery up to one summary per cognitive level
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum, IntEnum

from readiness_engine.errors import InvalidCellCode

_CELL_CODE_RE = re.compile(r"^([1-6])([A-D])$")

KNOWLEDGE_LETTERS = "ABCD"


class CognitiveLevel(IntEnum):
    """Cognitive process dimension, ordered low -> high complexity."""

    REMEMBER = 1
    UNDERSTAND = 2
    APPLY = 3
    ANALYZE = 4
    EVALUATE = 5
    CREATE = 6

    @property
    def display_name(self) -> str:
        """Human-readable name."""
        return self.name.title()


class KnowledgeType(str, Enum):
    """Knowledge dimension, keyed by its grid letter."""

    FACTUAL = "A"
    CONCEPTUAL = "B"
    PROCEDURAL = "C"
    METACOGNITIVE = "D"

    @property
    def index(self) -> int:
        """0-based column index in the grid."""
        return KNOWLEDGE_LETTERS.index(self.value)

    @property
    def display_name(self) -> str:
        """Human-readable name."""
        return self.name.title()


class LevelStatus(str, Enum):
    """Roll-up status of a cognitive level across its four cells."""

    NOT_STARTED = "not_started"
    DEVELOPING = "developing"  # > 0
    PROFICIENT = "proficient"  # 70-84
    MASTERED = "mastered"  # 85+

    @classmethod
    def from_average(cls, average: float) -> LevelStatus:
        if average >= CELL_MASTERED_SCORE:
            return cls.MASTERED
        elif average >= LEVEL_PROFICIENT_SCORE:
            return cls.PROFICIENT
        elif average > 0:
            return cls.DEVELOPING
        return cls.NOT_STARTED


CELL_MASTERED_SCORE = 85.0
LEVEL_PROFICIENT_SCORE = 70.0


@dataclass(frozen=True)
class TaxonomyCell:
    """One cell of the skill grid."""

    code: str
    cognitive_level: CognitiveLevel
    knowledge_type: KnowledgeType
    description: str
    typical_verbs: tuple[str, ...]
    example: str

    @property
    def cognitive_name(self) -> str:
        return self.cognitive_level.display_name

    @property
    def knowledge_name(self) -> str:
        return self.knowledge_type.display_name

    @property
    def display_name(self) -> str:
        """E.g. "Apply × Procedural"."""
        return f"{self.cognitive_name} × {self.knowledge_name}"


def cell_code(cognitive_index: int, knowledge_index: int | str | KnowledgeType) -> str:
    """
    Format a cell code from its grid coordinates.

    Args:
        cognitive_index: Cognitive level, 1-6
        knowledge_index: Knowledge column as a 0-based index (0-3),
            a letter ("A"-"D") or a KnowledgeType

    Returns:
        Cell code such as "3C"

    Raises:
        InvalidCellCode: If either coordinate is off the grid
    """
    if isinstance(knowledge_index, KnowledgeType):
        letter = knowledge_index.value
    elif isinstance(knowledge_index, str):
        letter = knowledge_index.strip().upper()
    elif isinstance(knowledge_index, int) and not isinstance(knowledge_index, bool) and 0 <= knowledge_index < 4:
        letter = KNOWLEDGE_LETTERS[knowledge_index]
    else:
        raise InvalidCellCode(f"{cognitive_index}{knowledge_index}")

    if isinstance(cognitive_index, bool) or not isinstance(cognitive_index, int):
        raise InvalidCellCode(f"{cognitive_index}{letter}")
    code = f"{int(cognitive_index)}{letter}"
    if not _CELL_CODE_RE.match(code):
        raise InvalidCellCode(code)
    return code


def parse_cell_code(code: str) -> tuple[int, int]:
    """
    Parse a cell code into (cognitive_index, knowledge_index).

    The knowledge index is 0-based so that it round-trips with cell_code().
    Surrounding whitespace and lower-case letters are accepted.

    Raises:
        InvalidCellCode: If the code does not match the fixed grid
    """
    if not isinstance(code, str):
        raise InvalidCellCode(code)
    match = _CELL_CODE_RE.match(code.strip().upper())
    if not match:
        raise InvalidCellCode(code)
    return int(match.group(1)), KNOWLEDGE_LETTERS.index(match.group(2))


def normalize_cell_code(code: str) -> str:
    """Return the canonical form of a cell code ("3c " -> "3C")."""
    cognitive, knowledge = parse_cell_code(code)
    return cell_code(cognitive, knowledge)


def is_cell_code(value: str) -> bool:
    """Check whether a string is a valid cell code."""
    try:
        parse_cell_code(value)
    except InvalidCellCode:
        return False
    return True


# ============================================================================
# Grid Definition
# ============================================================================

_CELL_DATA: dict[str, tuple[str, tuple[str, ...], str]] = {
    "1A": (
        "Retrieve relevant knowledge from long-term memory",
        ("Define", "List", "Name", "Identify", "Recall"),
        "List the five French mother sauces",
    ),
    "1B": (
        "Recall theories, models, principles, and generalizations",
        ("Recognize", "Describe", "Identify", "Retrieve", "Name"),
        "Describe the concept of mise en place in professional kitchens",
    ),
    "1C": (
        "Recall techniques and methods",
        ("Recall", "List", "Identify", "Name", "Recognize"),
        "List the steps for proper knife sharpening",
    ),
    "1D": (
        "Recall strategies and self-knowledge",
        ("Identify", "Recognize", "Recall", "Describe", "List"),
        "Identify personal learning preferences when mastering new techniques",
    ),
    "2A": (
        "Construct meaning from instructional messages",
        ("Explain", "Summarize", "Paraphrase", "Classify", "Compare"),
        "Explain why specific temperatures are important in food safety",
    ),
    "2B": (
        "Understand relationships among elements",
        ("Interpret", "Exemplify", "Classify", "Compare", "Explain"),
        "Explain the relationship between heat and protein coagulation",
    ),
    "2C": (
        "Understand how and when to use techniques",
        ("Clarify", "Interpret", "Summarize", "Infer", "Compare"),
        "Explain when to use dry heat vs. moist heat cooking methods",
    ),
    "2D": (
        "Understand one's own learning process",
        ("Interpret", "Infer", "Summarize", "Compare", "Explain"),
        "Explain personal strategies for mastering complex recipes",
    ),
    "3A": (
        "Use knowledge in familiar situations",
        ("Execute", "Implement", "Use", "Apply", "Carry out"),
        "Apply food safety guidelines during meal preparation",
    ),
    "3B": (
        "Apply concepts and principles",
        ("Use", "Apply", "Implement", "Demonstrate", "Show"),
        "Apply the concept of flavor profiling when balancing a dish",
    ),
    "3C": (
        "Carry out or use a procedure in a given situation",
        ("Execute", "Implement", "Demonstrate", "Perform", "Use"),
        "Execute julienne cuts with consistent 3mm dimensions",
    ),
    "3D": (
        "Apply self-monitoring strategies",
        ("Use", "Apply", "Execute", "Implement", "Perform"),
        "Apply self-assessment techniques while practicing new skills",
    ),
    "4A": (
        "Break material into parts and determine relationships",
        ("Differentiate", "Organize", "Attribute", "Compare", "Deconstruct"),
        "Analyze ingredient lists to identify potential allergens",
    ),
    "4B": (
        "Determine how elements fit within a structure",
        ("Differentiate", "Organize", "Integrate", "Find", "Structure"),
        "Analyze how different cooking methods affect nutritional content",
    ),
    "4C": (
        "Analyze procedures for efficiency and effectiveness",
        ("Differentiate", "Organize", "Deconstruct", "Outline", "Find"),
        "Analyze workflow to identify bottlenecks in mise en place",
    ),
    "4D": (
        "Analyze one's own thinking and learning",
        ("Differentiate", "Distinguish", "Focus", "Select", "Organize"),
        "Analyze which learning strategies work best for technique mastery",
    ),
    "5A": (
        "Make judgments based on criteria",
        ("Check", "Critique", "Judge", "Test", "Detect"),
        "Evaluate ingredient freshness using sensory indicators",
    ),
    "5B": (
        "Make judgments about theories and principles",
        ("Critique", "Judge", "Evaluate", "Assess", "Appraise"),
        "Critique menu designs based on nutritional balance principles",
    ),
    "5C": (
        "Judge the effectiveness of procedures",
        ("Check", "Critique", "Judge", "Evaluate", "Test"),
        "Evaluate the effectiveness of different plating techniques",
    ),
    "5D": (
        "Evaluate one's own learning and thinking",
        ("Reflect", "Judge", "Assess", "Evaluate", "Critique"),
        "Evaluate personal progress toward mastery of knife skills",
    ),
    "6A": (
        "Put elements together to form something new",
        ("Generate", "Plan", "Produce", "Design", "Construct"),
        "Generate ingredient substitutions for dietary restrictions",
    ),
    "6B": (
        "Create new theories or frameworks",
        ("Generate", "Design", "Plan", "Produce", "Construct"),
        "Design a new fusion cuisine concept combining culinary traditions",
    ),
    "6C": (
        "Create new procedures or techniques",
        ("Design", "Construct", "Plan", "Produce", "Devise"),
        "Design an innovative plating technique for a signature dish",
    ),
    "6D": (
        "Create new learning strategies",
        ("Generate", "Plan", "Design", "Develop", "Create"),
        "Design a personalized learning plan for culinary mastery",
    ),
}

TAXONOMY_CELLS: tuple[TaxonomyCell, ...] = tuple(
    TaxonomyCell(
        code=cell_code(level, knowledge),
        cognitive_level=level,
        knowledge_type=knowledge,
        description=_CELL_DATA[cell_code(level, knowledge)][0],
        typical_verbs=_CELL_DATA[cell_code(level, knowledge)][1],
        example=_CELL_DATA[cell_code(level, knowledge)][2],
    )
    for level in CognitiveLevel
    for knowledge in KnowledgeType
)

_CELLS_BY_CODE = {cell.code: cell for cell in TAXONOMY_CELLS}


def get_cell(code: str) -> TaxonomyCell:
    """Look up a cell by code. Raises InvalidCellCode for unknown codes."""
    return _CELLS_BY_CODE[normalize_cell_code(code)]


def cells_for_level(level: CognitiveLevel | int) -> tuple[TaxonomyCell, ...]:
    """The four cells of one cognitive level, in knowledge order."""
    level = CognitiveLevel(level)
    return tuple(cell for cell in TAXONOMY_CELLS if cell.cognitive_level == level)


# ============================================================================
# Level Roll-up
# ============================================================================


@dataclass(frozen=True)
class LevelMastery:
    """Mastery of one cognitive level aggregated over its four cells."""

    level: CognitiveLevel
    average_score: float
    cells_mastered: int
    cells_started: int
    total_cells: int
    status: LevelStatus

    @property
    def name(self) -> str:
        return self.level.display_name


def summarize_levels(cell_scores: Mapping[str, float]) -> list[LevelMastery]:
    """
    Roll per-cell mastery (0-100) up to one summary per cognitive level.

    Cells missing from cell_scores count as 0.

    Raises:
        InvalidCellCode: If cell_scores contains an unknown code
    """
    scores = {normalize_cell_code(code): float(score) for code, score in cell_scores.items()}

    summaries = []
    for level in CognitiveLevel:
        level_scores = [scores.get(cell.code, 0.0) for cell in cells_for_level(level)]
        average = sum(level_scores) / len(level_scores)
        summaries.append(
            LevelMastery(
                level=level,
                average_score=round(average, 2),
                cells_mastered=sum(1 for s in level_scores if s >= CELL_MASTERED_SCORE),
                cells_started=sum(1 for s in level_scores if s > 0),
                total_cells=len(level_scores),
                status=LevelStatus.from_average(average),
            )
        )
    return summaries
