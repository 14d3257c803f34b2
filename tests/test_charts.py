"""
Tests for wizard chart functions.
Verifies chart generation and structure without testing visual output.
"""
import unittest

from wizard_charts import create_group_allocation_chart, create_allocation_gauge, GROUP_COLORS


class TestWizardCharts(unittest.TestCase):

    def setUp(self):
        """Set up test data"""
        self.summary = {
            'essential': 600_000,
            'lifestyle': 360_000,
            'savings': 240_000,
        }

    def test_group_allocation_chart(self):
        """Test donut chart of group totals"""
        fig = create_group_allocation_chart(self.summary)

        self.assertIsNotNone(fig)
        self.assertEqual(fig.layout.title.text, "Your Budget Allocation")
        pie = fig.data[0]
        self.assertEqual(list(pie.labels), list(GROUP_COLORS.keys()))
        self.assertEqual(list(pie.values), [600_000, 360_000, 240_000])
        self.assertEqual(pie.hole, 0.4)

    def test_group_allocation_chart_missing_groups(self):
        """Missing totals are drawn as zero"""
        fig = create_group_allocation_chart({'essential': 1000})
        self.assertEqual(list(fig.data[0].values), [1000, 0, 0])

    def test_allocation_gauge(self):
        """Test gauge for a normal allocation"""
        fig = create_allocation_gauge(97.5)

        self.assertEqual(fig.layout.title.text, "Income Allocated")
        indicator = fig.data[0]
        self.assertEqual(indicator.value, 97.5)
        self.assertEqual(indicator.gauge.threshold.value, 105)
        self.assertEqual(indicator.gauge.bar.color, '#4ECDC4')

    def test_allocation_gauge_over_budget(self):
        """Over-allocation turns the bar red and widens the axis"""
        fig = create_allocation_gauge(150)
        indicator = fig.data[0]
        self.assertEqual(indicator.gauge.bar.color, '#FF6B6B')
        self.assertEqual(indicator.gauge.axis.range[1], 150)


if __name__ == '__main__':
    unittest.main()
