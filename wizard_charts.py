"""
Wizard Chart Utilities
Chart creation functions for the budget review and confirmation steps.
"""

import plotly.graph_objects as go

GROUP_COLORS = {
    'Essential': '#45B7D1',
    'Lifestyle': '#FF6B6B',
    'Savings & Goals': '#96CEB4',
}


def create_group_allocation_chart(summary):
    """Donut of annual essential / lifestyle / savings totals"""
    labels = list(GROUP_COLORS.keys())
    values = [summary.get('essential', 0), summary.get('lifestyle', 0), summary.get('savings', 0)]

    fig = go.Figure(data=[go.Pie(
        labels=labels,
        values=values,
        hole=0.4,
        marker_colors=[GROUP_COLORS[label] for label in labels],
        textinfo='label+percent',
        textposition='outside',
        sort=False
    )])

    fig.update_layout(
        title="Your Budget Allocation",
        font=dict(size=14),
        height=400,
        showlegend=False
    )

    return fig


def create_allocation_gauge(percentage):
    """Gauge of allocated income with the 95-100% target band highlighted"""
    fig = go.Figure(go.Indicator(
        mode="gauge+number",
        value=percentage,
        number={'suffix': '%', 'valueformat': '.1f'},
        gauge={
            'axis': {'range': [0, max(120, percentage)]},
            'bar': {'color': '#FF6B6B' if percentage > 100 else '#4ECDC4'},
            'steps': [
                {'range': [95, 100], 'color': '#D4EDDA'},
                {'range': [100, 105], 'color': '#FFF3CD'},
            ],
            'threshold': {'line': {'color': 'red', 'width': 3}, 'value': 105},
        }
    ))

    fig.update_layout(
        title="Income Allocated",
        height=300,
        template="plotly_white"
    )

    return fig
