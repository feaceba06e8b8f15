"""
LaserCalc - Laser Cutting Engineering Calculators
Main Streamlit Application Entry Point
"""

import streamlit as st

from lasercalc.calculators import list_calculators
from lasercalc.config import configure_logging, get_settings
from lasercalc.i18n import available_locales, load_localizer

# Page configuration
st.set_page_config(
    page_title="LaserCalc",
    page_icon="🔦",
    layout="wide",
    initial_sidebar_state="expanded"
)


@st.cache_resource
def _startup() -> None:
    """One-time process setup."""
    configure_logging(get_settings())


@st.cache_resource
def _localizer(locale: str):
    return load_localizer(locale)


_startup()

# Session state initialization
if 'locale' not in st.session_state:
    st.session_state.locale = get_settings().locale

if 'last_result' not in st.session_state:
    st.session_state.last_result = None

calculators = list_calculators()

# Sidebar navigation
with st.sidebar:
    st.title("LaserCalc")
    st.markdown("---")

    locales = available_locales()
    st.session_state.locale = st.selectbox(
        "Language",
        locales,
        index=locales.index(st.session_state.locale) if st.session_state.locale in locales else 0
    )
    i18n = _localizer(st.session_state.locale)

    categories = sorted({calc.info.category for calc in calculators})
    category = st.radio("Category", categories, index=0)

    in_category = [calc for calc in calculators if calc.info.category == category]
    selected = st.radio(
        "Calculator",
        in_category,
        format_func=lambda calc: i18n.title(calc.info),
        index=0
    )

    st.markdown("---")
    st.markdown("### Calculator Info")
    st.info(f"Version: {selected.info.version}")
    st.info(f"Fields: {len(selected.schema)}")

# Main content area
from pages import calculator
calculator.render(selected, i18n)
