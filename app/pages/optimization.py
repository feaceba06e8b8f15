"""
Optimization Page - convergence history, Pareto front and alternatives
"""

from typing import Any, Dict

import pandas as pd
import streamlit as st

from visualization import plot_convergence, plot_pareto_front


def render_results(data: Dict[str, Any]):
    """Render process optimization results."""
    summary = data["optimization_summary"]
    optimal = data["optimal_parameters"]

    st.markdown("### Optimization Results")
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Final Fitness", f"{summary['final_fitness']:.3f}")
    col2.metric("Improvement", f"{summary['improvement_percent']:.1f}%")
    col3.metric("Generations", summary["generations"])
    col4.metric("Converged", "✅ Yes" if summary["convergence_achieved"] else "⏳ No")

    # Optimal parameters
    st.markdown("#### Optimal Parameters")
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Power", f"{optimal['power']:.0f} W")
    col2.metric("Speed", f"{optimal['speed']:.0f} mm/min")
    col3.metric("Gas Pressure", f"{optimal['gas_pressure']:.1f} bar")
    col4.metric("Focus Height", f"{optimal['focus_height']:.1f} mm")

    objectives = pd.DataFrame([optimal["objectives"]])
    st.dataframe(objectives, use_container_width=True)

    tab1, tab2, tab3, tab4 = st.tabs([
        "📈 Convergence",
        "🎯 Pareto Front",
        "🔀 Alternatives",
        "💡 Insights"
    ])

    with tab1:
        st.plotly_chart(plot_convergence(data["convergence_history"]), use_container_width=True)

    with tab2:
        render_pareto_front(data["pareto_front"])

    with tab3:
        for alternative in data["alternative_solutions"]:
            with st.expander(f"{alternative['name']} - suitability {alternative['suitability']}/10"):
                st.markdown(alternative["description"])
                st.dataframe(pd.DataFrame([alternative["parameters"]]), use_container_width=True)
                for tradeoff in alternative["tradeoffs"]:
                    st.markdown(f"- {tradeoff}")

    with tab4:
        insights = data["optimization_insights"]
        st.dataframe(pd.DataFrame(insights["parameter_sensitivity"]), use_container_width=True)
        for line in insights["recommendations"] + insights["implementation_guidance"]:
            st.info(line)

    for warning in data["warnings"]:
        st.warning(f"⚠️ {warning}")


def pareto_table(front) -> pd.DataFrame:
    """Flatten Pareto solutions into one row per solution."""
    rows = []
    for solution in front:
        row = dict(solution["parameters"])
        row.update(solution["objectives"])
        row["crowding_distance"] = solution["crowding_distance"]
        rows.append(row)
    return pd.DataFrame(rows)


def render_pareto_front(front):
    if not front:
        st.info("No Pareto solutions available")
        return

    df = pareto_table(front)
    st.dataframe(df, use_container_width=True)
    st.plotly_chart(plot_pareto_front(df), use_container_width=True)

    csv = df.to_csv(index=False)
    st.download_button(
        label="📥 Download Pareto Front",
        data=csv,
        file_name="pareto_front.csv",
        mime="text/csv"
    )
