"""
Template Question Bank.

Deterministic stand-in for the external question-generation capability.
Prompts cycle through a fixed pool per difficulty, and answer options are
rotated by question index instead of shuffled, so the same request always
yields the same question set.
"""

from __future__ import annotations

from readiness_engine.models import Difficulty, Question

_DISTRACTORS = ("Incorrect option B", "Incorrect option C", "Incorrect option D")

_TEMPLATES: dict[Difficulty, list[tuple[str, str]]] = {
    Difficulty.EASY: [
        ("What is the primary fat used in making hollandaise sauce?", "Clarified butter"),
        ("At what temperature should egg yolks be cooked for hollandaise?", "60-65°C (140-150°F)"),
        ("Which mother sauce is hollandaise derived from?", "It is a mother sauce itself"),
    ],
    Difficulty.MEDIUM: [
        (
            "Explain why hollandaise sauce can break and how to fix it",
            "Breaks due to temperature or ratio issues; fix by whisking in warm water",
        ),
        (
            "Compare the difference between hollandaise and béarnaise sauce",
            "Béarnaise uses tarragon and shallots reduction instead of lemon",
        ),
        (
            "What role does acid play in emulsion sauces?",
            "Acid helps emulsification and adds flavor balance",
        ),
    ],
    Difficulty.HARD: [
        (
            "Design a derivative sauce of hollandaise for a seafood dish and explain your choices",
            "Could use champagne reduction + caviar for elegance",
        ),
        (
            "Analyze how altitude affects emulsion sauce preparation",
            "Lower boiling point at altitude affects cooking temperature",
        ),
        (
            "Troubleshoot: Your béarnaise separated during service. What are 3 possible causes?",
            "Overheating, too-fast butter addition, or cold ingredients",
        ),
    ],
    Difficulty.ADAPTIVE: [
        (
            "Demonstrate your understanding of emulsion sauce fundamentals",
            "Emulsion = suspended fat droplets in liquid medium",
        ),
        (
            "Apply proper technique to fix a broken hollandaise",
            "Whisk in warm water gradually to re-emulsify",
        ),
        (
            "Evaluate the quality of this béarnaise preparation",
            "Check consistency, flavor balance, and temperature",
        ),
    ],
}

_BLOOM_LEVELS = {
    Difficulty.EASY: "remember",
    Difficulty.MEDIUM: "understand",
}

_POINTS = {
    Difficulty.EASY: 5,
    Difficulty.MEDIUM: 10,
}


class TemplateQuestionBank:
    """Generates multiple-choice questions from fixed templates."""

    def generate_questions(self, count: int, difficulty: Difficulty | str) -> list[Question]:
        """
        Generate `count` questions at the requested difficulty.

        Args:
            count: Number of questions (>= 0)
            difficulty: Difficulty enum or its string value

        Returns:
            List of Question, ids "rdc_q1".."rdc_qN"
        """
        if count < 0:
            raise ValueError(f"count must be >= 0, got {count}")
        difficulty = Difficulty(difficulty)
        templates = _TEMPLATES[difficulty]

        questions = []
        for i in range(count):
            prompt, answer = templates[i % len(templates)]
            options = [answer, *_DISTRACTORS]
            shift = i % len(options)
            options = options[shift:] + options[:shift]

            questions.append(
                Question(
                    question_id=f"rdc_q{i + 1}",
                    question_type="mcq",
                    prompt=prompt,
                    options=options,
                    correct_answer=answer,
                    explanation=(
                        f"This question tests your {difficulty.value}-level understanding "
                        "of sauce techniques."
                    ),
                    bloom_level=_BLOOM_LEVELS.get(difficulty, "apply"),
                    points=_POINTS.get(difficulty, 15),
                )
            )
        return questions
