"""Interview practice result summaries."""
import logging
import random
from typing import Any, Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)

CATEGORIES = ('technical_knowledge', 'communication', 'problem_solving', 'confidence')

DEFAULT_SCORE = 70
DEFAULT_ANSWER_SCORE = 5

RECOMMENDATIONS = [
    'Practice explaining your thought process out loud',
    'Use the STAR method for behavioral questions',
    'Research the company before real interviews',
]


def display_jitter(overall: int, categories: Iterable[str], rng: random.Random) -> Dict[str, int]:
    """Spread an overall score across categories for display.

    Each category gets the overall score shifted by an integer in
    [-5, 4], clamped to 0..100. The values are cosmetic only and must
    not be stored or compared.

    Args:
        overall: Overall percentage
        categories: Category names to fill
        rng: Random source, injected so callers control seeding
    """
    return {
        category: max(0, min(100, overall + rng.randrange(10) - 5))
        for category in categories
    }


def evaluate_answer_heuristically(answer: str) -> Dict[str, Any]:
    """Score an answer without a language model.

    Longer answers and answers that give an example score higher; the
    score is capped at 10.
    """
    length = len(answer or '')
    score = DEFAULT_ANSWER_SCORE
    if length > 200:
        score += 2
    if length > 100:
        score += 1
    lowered = (answer or '').lower()
    if 'example' in lowered or 'instance' in lowered:
        score += 1

    return {
        'score': min(score, 10),
        'strengths': ['Detailed response'] if length > 100 else ['Concise answer'],
        'improvements': ['Could provide more details'] if length < 100 else [],
        'suggestion': 'Consider using the STAR method for behavioral questions',
    }


def _unique(items: Iterable[str], limit: int = 5) -> List[str]:
    seen: List[str] = []
    for item in items:
        if item not in seen:
            seen.append(item)
    return seen[:limit]


def summarize_interview(feedbacks: List[Dict[str, Any]], rng: Optional[random.Random] = None) -> Dict[str, Any]:
    """Summarize per-answer feedback into an interview result.

    Args:
        feedbacks: Feedback dicts with ``score`` (1-10), ``strengths``
            and ``improvements``
        rng: Random source for the display-only category spread

    Returns:
        Dict with overall score, category scores, strengths,
        areas to improve, recommendations and a summary
    """
    rng = rng or random.Random()

    if not feedbacks:
        return {
            'overall_score': DEFAULT_SCORE,
            'category_scores': {category: DEFAULT_SCORE for category in CATEGORIES},
            'strengths': ['Completed the interview'],
            'areas_to_improve': ['Practice more'],
            'recommendations': ['Keep practicing with mock interviews'],
            'summary': 'You completed the interview. Keep practicing to improve your skills.',
        }

    scores = [f.get('score') or DEFAULT_ANSWER_SCORE for f in feedbacks]
    overall = int(sum(scores) / len(scores) * 10 + 0.5)

    strengths = _unique(s for f in feedbacks for s in f.get('strengths') or [])
    improvements = _unique(s for f in feedbacks for s in f.get('improvements') or [])

    verdict = 'Good job!' if overall >= 70 else 'Keep practicing to improve.'
    focus = improvements[0] if improvements else 'providing detailed answers'
    logger.debug(f"Interview summary over {len(feedbacks)} answers: {overall}%")

    return {
        'overall_score': overall,
        'category_scores': display_jitter(overall, CATEGORIES, rng),
        'strengths': strengths,
        'areas_to_improve': improvements,
        'recommendations': list(RECOMMENDATIONS),
        'summary': f"You scored {overall}% in this mock interview. {verdict} Focus on {focus}.",
    }
