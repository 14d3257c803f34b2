"""
Unit tests for the wizard progress indicator helpers.
"""
from wizard_progress import (
    step_status, progress_fraction, progress_percent, can_click_step,
    progress_steps, progress_caption,
    STATUS_COMPLETED, STATUS_CURRENT, STATUS_UPCOMING,
)


class TestProgress:
    """Test step status and progress values"""

    def test_step_status(self):
        assert step_status(2, 4) == STATUS_COMPLETED
        assert step_status(4, 4) == STATUS_CURRENT
        assert step_status(5, 4) == STATUS_UPCOMING

    def test_progress_values(self):
        assert progress_fraction(7, 7) == 1.0
        assert progress_percent(1, 7) == 14
        assert progress_percent(4, 7) == 57
        assert progress_fraction(3, 0) == 0.0

    def test_clickable_steps(self):
        assert can_click_step(1, 3)
        assert can_click_step(3, 3)
        assert not can_click_step(4, 3)
        assert not can_click_step(0, 3)

    def test_progress_steps(self):
        steps = progress_steps(3)
        assert len(steps) == 7
        assert [s['status'] for s in steps[:4]] == [STATUS_COMPLETED, STATUS_COMPLETED,
                                                    STATUS_CURRENT, STATUS_UPCOMING]
        assert steps[0]['id'] == 'priority'
        assert steps[6]['title'] == 'Complete'
        assert [s['clickable'] for s in steps] == [True, True, True, False, False, False, False]

    def test_caption(self):
        assert progress_caption(2, 7) == "Step 2 of 7: Income (29%)"
