"""
CashCompass - Main Application Entry Point

A Streamlit multipage application for personal budgeting featuring:
- A guided Budget Creation Wizard (priority, income, profile, categories)
- 50/30/20 budget recommendations
- Saved progress that resumes within 24 hours
"""

import streamlit as st

from config_utils import load_app_config


def start_page():
    """Start page content"""
    if 'wizard_completed' not in st.session_state:
        st.session_state.wizard_completed = False
    if 'app_config' not in st.session_state:
        st.session_state.app_config = load_app_config()

    st.title("🧭 CashCompass")

    st.markdown("""
    ### Welcome to Your Personal Budgeting Companion

    Build a budget that gives every shilling a job, in about five minutes.
    """)

    col1, col2 = st.columns(2)

    with col1:
        st.markdown("### 🪄 Budget Creation Wizard")
        st.markdown("""
        **Perfect for your first budget or a fresh start**

        ✨ **Features:**
        - Step-by-step guided setup
        - Income from several sources
        - Essential categories pre-selected
        - Optional 50/30/20 recommendation
        - Progress saved as you go

        📋 **Covers:**
        - Your main financial priority
        - Income and personal situation
        - Spending categories
        - Review, adjust & confirm
        """)

        if st.button("🚀 Start Budget Wizard", type="primary"):
            st.switch_page("pages/wizard.py")

    with col2:
        st.markdown("### 📐 The 50/30/20 Rule")
        st.markdown("""
        **A simple, balanced starting point**

        - **50%** for essentials: housing, transport, groceries, health
        - **30%** for lifestyle: dining out, entertainment, hobbies
        - **20%** for savings & goals: emergency fund, retirement, investments

        Every amount can be adjusted on the review step.
        """)

    st.markdown("---")

    col1, col2, col3 = st.columns(3)

    with col1:
        if st.session_state.wizard_completed:
            st.success("✅ Your budget has been created")
        else:
            st.info("ℹ️ No budget created yet")

    with col2:
        st.info("💡 **Tip**: Progress is kept for 24 hours, so you can come back later")

    with col3:
        st.info(f"🌐 **Budget API**: {st.session_state.app_config['api_url']}")

    st.markdown("---")
    st.markdown("""
    <div style='text-align: center; color: #666; font-size: 14px;'>
        <p>🧭 CashCompass | Built with Streamlit</p>
    </div>
    """, unsafe_allow_html=True)


st.set_page_config(
    page_title="CashCompass",
    page_icon="🧭",
    layout="wide",
    initial_sidebar_state="expanded"
)

pages = [
    st.Page(start_page, title="Start", icon="🏠"),
    st.Page("pages/wizard.py", title="Budget Wizard", icon="🪄"),
]

pg = st.navigation(pages)
pg.run()
