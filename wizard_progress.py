"""
Wizard progress indicator.
Stateless helpers mapping (current_step, total_steps) to what the progress
header shows.
"""
from typing import Dict, List

from config_utils import WIZARD_STEPS

STATUS_COMPLETED = 'completed'
STATUS_CURRENT = 'current'
STATUS_UPCOMING = 'upcoming'

STATUS_ICONS = {
    STATUS_COMPLETED: '✅',
    STATUS_CURRENT: '🔵',
    STATUS_UPCOMING: '⚪',
}


def step_status(step_number: int, current_step: int) -> str:
    if step_number < current_step:
        return STATUS_COMPLETED
    if step_number == current_step:
        return STATUS_CURRENT
    return STATUS_UPCOMING


def progress_fraction(current_step: int, total_steps: int) -> float:
    if total_steps <= 0:
        return 0.0
    return max(0.0, min(1.0, current_step / total_steps))


def progress_percent(current_step: int, total_steps: int) -> int:
    return round(progress_fraction(current_step, total_steps) * 100)


def can_click_step(step_number: int, current_step: int) -> bool:
    """Only completed steps and the current one are navigable"""
    return 1 <= step_number <= current_step


def progress_steps(current_step: int) -> List[Dict[str, object]]:
    """Step list with number, title, description and status for rendering"""
    steps = []
    for number, step in enumerate(WIZARD_STEPS, start=1):
        status = step_status(number, current_step)
        steps.append({
            'number': number,
            'id': step['id'],
            'title': step['title'],
            'description': step['description'],
            'status': status,
            'icon': STATUS_ICONS[status],
            'clickable': can_click_step(number, current_step),
        })
    return steps


def progress_caption(current_step: int, total_steps: int) -> str:
    title = WIZARD_STEPS[current_step - 1]['title'] if 1 <= current_step <= len(WIZARD_STEPS) else ''
    return f"Step {current_step} of {total_steps}: {title} ({progress_percent(current_step, total_steps)}%)"
