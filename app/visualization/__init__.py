"""
Visualization module for LaserCalc
"""

from .plotter import (
    plot_convergence,
    plot_pareto_front,
    plot_temperature_profile,
    plot_time_breakdown
)

__all__ = [
    'plot_convergence',
    'plot_pareto_front',
    'plot_temperature_profile',
    'plot_time_breakdown'
]
