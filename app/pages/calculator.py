"""
Calculator Page - form rendered from the input schema, results envelope
"""

from typing import Any, Dict

import pandas as pd
import streamlit as st

from lasercalc.core import Calculator, FieldKind, FieldSpec
from lasercalc.i18n import Localizer


def render(calc: Calculator, i18n: Localizer):
    """Render one calculator: form, validation feedback and results."""
    st.title(i18n.title(calc.info))
    st.markdown(i18n.summary(calc.info))

    col1, col2 = st.columns([1, 4])
    with col1:
        if st.button("📋 Load Example", use_container_width=True):
            st.session_state[f"{calc.id}:example"] = True

    use_example = st.session_state.get(f"{calc.id}:example", False)
    initial = calc.get_example_inputs() if use_example else calc.get_default_inputs()

    with st.form(key=f"form:{calc.id}"):
        raw = {}
        columns = st.columns(2)
        for i, spec in enumerate(calc.schema.specs):
            with columns[i % 2]:
                raw[spec.id] = render_field(spec, initial.get(spec.id), i18n, key=f"{calc.id}:{spec.id}")

        submitted = st.form_submit_button("▶️ Calculate", type="primary", use_container_width=True)

    if not submitted:
        return

    validation = calc.validate_inputs(raw)
    for issue in validation.errors:
        field = calc.schema.field(issue.field) if issue.field in calc.schema.ids() else None
        st.error(f"❌ {i18n.message(issue, field)}")
    for issue in validation.warnings:
        field = calc.schema.field(issue.field) if issue.field in calc.schema.ids() else None
        st.warning(f"⚠️ {i18n.message(issue, field)}")

    if not validation.is_valid:
        return

    with st.spinner("Calculating..."):
        result = calc.calculate(raw)
    st.session_state.last_result = result

    if not result.success:
        st.error(f"❌ {result.error}")
    else:
        render_data(calc, result.data.model_dump(mode="json"))

    with st.expander("Metadata"):
        st.json(result.metadata.model_dump(mode="json"))


def render_field(spec: FieldSpec, value: Any, i18n: Localizer, key: str) -> Any:
    """Render one input widget and return its value."""
    label = i18n.label(spec)
    if spec.unit:
        label = f"{label} ({spec.unit})"
    help_text = i18n.description(spec) or None

    if spec.kind == FieldKind.NUMBER:
        cast = int if spec.integer else float
        return st.number_input(
            label,
            min_value=None if spec.min is None else cast(spec.min),
            max_value=None if spec.max is None else cast(spec.max),
            value=None if value is None else cast(value),
            step=cast(spec.step) if spec.step else None,
            help=help_text,
            key=key
        )

    if spec.kind == FieldKind.SELECT:
        options = {option.value: option for option in spec.options}
        values = list(options)
        return st.selectbox(
            label,
            values,
            index=values.index(value) if value in options else None,
            format_func=lambda v: i18n.option_label(spec, options[v]),
            help=help_text,
            key=key
        )

    return st.text_input(label, value=value or "", help=help_text, key=key)


def render_data(calc: Calculator, data: Dict[str, Any]):
    """Display result data: scalar metrics, lists and nested tables."""
    st.success("✅ Calculation completed")

    if calc.id == "process-optimization-engine":
        from pages import optimization
        optimization.render_results(data)
        return

    scalars = {k: v for k, v in data.items() if isinstance(v, (int, float, str)) and not isinstance(v, bool)}
    columns = st.columns(min(4, max(1, len(scalars))))
    for i, (name, value) in enumerate(scalars.items()):
        columns[i % len(columns)].metric(name.replace("_", " ").title(), value)

    for name, value in data.items():
        if name in scalars:
            continue
        title = name.replace("_", " ").title()
        if name in ("recommendations", "warnings", "control_recommendations"):
            if value:
                st.markdown(f"#### {title}")
                for line in value:
                    (st.warning if name == "warnings" else st.info)(line)
        elif isinstance(value, list) and value and isinstance(value[0], dict):
            st.markdown(f"#### {title}")
            st.dataframe(pd.DataFrame(value), use_container_width=True)
        elif isinstance(value, dict):
            with st.expander(title):
                st.json(value)

    if "temperature_profile" in data:
        from visualization import plot_temperature_profile
        st.plotly_chart(plot_temperature_profile(data["temperature_profile"]), use_container_width=True)
    if "time_breakdown" in data:
        from visualization import plot_time_breakdown
        st.plotly_chart(plot_time_breakdown(data["time_breakdown"]), use_container_width=True)
