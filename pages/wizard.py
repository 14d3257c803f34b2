"""
CashCompass Budget Wizard - Guided Budget Creation
A step-by-step wizard that turns your priorities and income into a monthly budget.
Part of the CashCompass multipage app; all rules live in budget_wizard.py and
the *_utils modules, this page only renders them.
"""

import streamlit as st

from api_client import BudgetAPIClient, LocalRecommendationService
from budget_utils import (
    update_entry_amount, rename_entry, add_custom_entry, remove_entry,
    total_allocated, income_for_view, allocation_percentage, remaining_income,
    allocation_status, STATUS_OVER, STATUS_SUCCESS, VIEW_MONTHLY, VIEW_ANNUAL,
)
from budget_wizard import BudgetWizard, clear_wizard_session
from category_utils import (
    default_selection, select_all, deselect_all, essential_only,
    toggle_category, toggle_subcategory, selection_counts,
)
from config_utils import load_app_config
from io_utils import format_currency, export_budget_csv, budget_to_dataframe
from persistence import FileProgressStore
from recommendation import bucket_totals
from taxonomy import (
    PRIORITIES, INCOME_TYPES, INCOME_FREQUENCIES, AGE_RANGES, LIVING_SITUATIONS,
    LIFE_STAGES, DEFAULT_CATEGORIES, GROUPS, GROUP_LABELS, GROUP_LIFESTYLE,
)
from wizard_charts import create_group_allocation_chart, create_allocation_gauge
from wizard_models import Priority, IncomeSource
from wizard_progress import progress_fraction, progress_caption, progress_steps
from wizard_utils import (
    new_income_source, total_annual_income, remove_income_source,
    priority_display_text, build_profile,
)


def _on_complete(created_budget):
    st.session_state.created_budget = created_budget
    st.session_state.wizard_completed = True


def _on_cancel():
    st.session_state.wizard_cancelled = True


def get_wizard() -> BudgetWizard:
    """Create the wizard once per browser session"""
    if 'budget_wizard' not in st.session_state:
        config = load_app_config()
        st.session_state.app_config = config
        api = BudgetAPIClient(config['api_url'], config.get('api_token'),
                              timeout=float(config.get('request_timeout', 10)))
        recommender = api if config.get('use_remote_recommendations') else LocalRecommendationService()

        wizard = BudgetWizard(
            store=FileProgressStore(config['progress_dir']),
            user_id=config.get('user_id'),
            recommendation_service=recommender,
            budget_service=api,
            on_complete=_on_complete,
            on_cancel=_on_cancel,
            budget_period=config.get('budget_period', 'monthly'),
        )
        if wizard.resumed:
            st.toast("Resuming your budget creation...", icon="🔄")
        st.session_state.budget_wizard = wizard
    return st.session_state.budget_wizard


def money(value: float) -> str:
    return format_currency(value, st.session_state.app_config.get('currency', 'KES'))


def show_result(ok: bool, error: str) -> None:
    if ok:
        st.rerun()
    else:
        st.error(error)


def create_progress_header(wizard: BudgetWizard):
    """Progress bar plus clickable completed steps"""
    col1, col2, col3 = st.columns([1, 4, 1])
    with col2:
        st.progress(progress_fraction(wizard.current_step, wizard.total_steps))
        st.caption(progress_caption(wizard.current_step, wizard.total_steps))

    step_cols = st.columns(wizard.total_steps)
    for col, step in zip(step_cols, progress_steps(wizard.current_step)):
        with col:
            label = f"{step['icon']} {step['title']}"
            if st.button(label, key=f"wiz_nav_{step['number']}", disabled=not step['clickable'],
                         help=step['description'], use_container_width=True):
                if wizard.jump_to(step['number']):
                    st.rerun()


def create_back_button(wizard: BudgetWizard, key: str):
    if wizard.current_step > 1 and st.button("← Back", key=key, disabled=wizard.loading):
        wizard.retreat()
        st.rerun()


def step_priority(wizard: BudgetWizard):
    """Step 1: main financial priority"""
    st.markdown("""
    # 🎯 What's your main financial priority?

    Your answer shapes how we frame your budget.
    """)

    current = wizard.state.priority
    ids = [p['id'] for p in PRIORITIES]
    index = ids.index(current.value) if current and not current.is_custom else None

    selected_id = st.radio(
        "Choose one",
        options=ids,
        index=index,
        format_func=lambda pid: next(f"{p['icon']} **{p['title']}** - {p['description']}"
                                     for p in PRIORITIES if p['id'] == pid),
        key="wiz_priority_choice",
    )
    custom_text = st.text_input(
        "...or describe your own priority",
        value=current.value if current and current.is_custom else '',
        key="wiz_priority_custom",
    )

    if st.button("Continue →", type="primary", key="wiz_priority_next"):
        priority = Priority.custom(custom_text) if custom_text.strip() else (
            Priority.preset(selected_id) if selected_id else None)
        show_result(*wizard.submit_priority(priority))


def step_income(wizard: BudgetWizard):
    """Step 2: income sources"""
    st.markdown("""
    # 💰 Let's set up your income sources

    Add all your income sources so we can create an accurate budget.
    """)

    if 'wiz_incomes' not in st.session_state:
        st.session_state.wiz_incomes = list(wizard.state.income_sources) or [new_income_source()]
    incomes = st.session_state.wiz_incomes

    type_labels = {t['value']: t['label'] for t in INCOME_TYPES}
    edited = []
    for index, income in enumerate(incomes):
        with st.container(border=True):
            st.markdown(f"**Income Source {index + 1}**")
            col1, col2, col3, col4 = st.columns([3, 2, 2, 2])
            with col1:
                name = st.text_input("Name", value=income.name, key=f"wiz_inc_name_{income.id}")
            with col2:
                amount = st.number_input("Amount", min_value=0.0, value=float(income.amount),
                                         step=1000.0, key=f"wiz_inc_amount_{income.id}")
            with col3:
                frequency = st.selectbox("Frequency", INCOME_FREQUENCIES,
                                         index=INCOME_FREQUENCIES.index(income.frequency),
                                         key=f"wiz_inc_freq_{income.id}")
            with col4:
                income_type = st.selectbox("Type", list(type_labels), format_func=type_labels.get,
                                           index=list(type_labels).index(income.type)
                                           if income.type in type_labels else 0,
                                           key=f"wiz_inc_type_{income.id}")
            edited.append(IncomeSource(id=income.id, name=name, amount=amount,
                                       frequency=frequency, type=income_type))
            if len(incomes) > 1 and st.button("🗑️ Remove", key=f"wiz_inc_remove_{income.id}"):
                st.session_state.wiz_incomes = remove_income_source(edited + incomes[index + 1:], income.id)
                st.rerun()
    st.session_state.wiz_incomes = edited

    if st.button("➕ Add another income source"):
        st.session_state.wiz_incomes = edited + [new_income_source()]
        st.rerun()

    total = total_annual_income(edited)
    if total > 0:
        col1, col2 = st.columns(2)
        col1.metric("Total Annual Income", money(total))
        col2.metric("Monthly", money(total / 12))

    col_back, col_next = st.columns([1, 1])
    with col_back:
        create_back_button(wizard, "wiz_income_back")
    with col_next:
        if st.button("Continue →", type="primary", key="wiz_income_next"):
            ok, error = wizard.submit_income(edited)
            if ok:
                del st.session_state.wiz_incomes
            show_result(ok, error)


def _option_select(label, options, current, key):
    values = [''] + [o['value'] for o in options]
    labels = {o['value']: o['label'] for o in options}
    labels[''] = 'Prefer not to say'
    return st.selectbox(label, values, index=values.index(current) if current in values else 0,
                        format_func=labels.get, key=key)


def step_profile(wizard: BudgetWizard):
    """Step 3: optional personal profile"""
    st.markdown("""
    # 👤 Tell us about your situation

    This is optional. It helps tailor the recommendations to your lifestyle.
    """)

    profile = wizard.state.profile
    col1, col2 = st.columns(2)
    with col1:
        age_range = _option_select("Age Range", AGE_RANGES, profile.age_range, "wiz_age_range")
        living = _option_select("Living Situation", LIVING_SITUATIONS, profile.living_situation, "wiz_living")
        life_stage = _option_select("Life Stage", LIFE_STAGES, profile.life_stage, "wiz_life_stage")
    with col2:
        dependents = st.number_input("Dependents", min_value=0, value=profile.dependents, step=1,
                                     key="wiz_dependents")
        location = st.text_input("Location", value=profile.location, key="wiz_location")

    raw = {'age_range': age_range, 'living_situation': living, 'life_stage': life_stage,
           'dependents': dependents, 'location': location}

    col_back, col_skip, col_next = st.columns([1, 1, 1])
    with col_back:
        create_back_button(wizard, "wiz_profile_back")
    with col_skip:
        if st.button("Skip", key="wiz_profile_skip"):
            show_result(*wizard.skip_profile(build_profile(raw)))
    with col_next:
        if st.button("Continue →", type="primary", key="wiz_profile_next"):
            show_result(*wizard.submit_profile(build_profile(raw)))


def _set_selection(selection):
    st.session_state.wiz_selection = selection
    st.session_state.wiz_selection_rev = st.session_state.get('wiz_selection_rev', 0) + 1
    st.rerun()


def step_categories(wizard: BudgetWizard):
    """Step 4: categories and subcategories to budget for"""
    st.markdown("""
    # 🗂️ Choose your budget categories

    Essential categories are pre-selected. Pick the subcategories you spend on.
    """)

    if 'wiz_selection' not in st.session_state:
        st.session_state.wiz_selection = wizard.state.selected_categories or default_selection()
    selection = st.session_state.wiz_selection
    rev = st.session_state.get('wiz_selection_rev', 0)

    col1, col2, col3 = st.columns(3)
    if col1.button("⭐ Essential Only"):
        _set_selection(essential_only())
    if col2.button("☑️ Select All"):
        _set_selection(select_all())
    if col3.button("⬜ Deselect All"):
        _set_selection(deselect_all())

    for category in DEFAULT_CATEGORIES:
        name = category['name']
        entry = selection.get(name, {'selected': False, 'subcategories': {}})
        with st.expander(f"{'✅' if entry['selected'] else '⬜'} {name}", expanded=category['isEssential']):
            st.caption(category['description'])
            checked = st.checkbox(f"Budget for {name}", value=entry['selected'], key=f"wiz_cat_{name}_{rev}")
            if checked != entry['selected']:
                _set_selection(toggle_category(selection, name))
            sub_cols = st.columns(2)
            for i, sub in enumerate(category['subcategories']):
                current = entry['subcategories'].get(sub['name'], False)
                label = f"{sub['name']}{' (essential)' if sub['essential'] else ''}"
                with sub_cols[i % 2]:
                    if st.checkbox(label, value=current, key=f"wiz_sub_{name}_{sub['name']}_{rev}") != current:
                        _set_selection(toggle_subcategory(selection, name, sub['name']))

    categories, subcategories = selection_counts(selection)
    st.info(f"{categories} categories and {subcategories} subcategories selected")

    col_back, col_next = st.columns([1, 1])
    with col_back:
        create_back_button(wizard, "wiz_categories_back")
    with col_next:
        if st.button("Continue →", type="primary", key="wiz_categories_next"):
            ok, error = wizard.submit_categories(selection)
            if ok:
                del st.session_state.wiz_selection
            show_result(ok, error)


def step_recommendation(wizard: BudgetWizard):
    """Step 5: offer a 50/30/20 recommendation or start from zero"""
    income = wizard.total_annual_income
    st.markdown(f"""
    # 💡 Would you like a recommended budget?

    You told us you want to **{priority_display_text(wizard.state.priority)}**.
    With an annual income of **{money(income)}**, a balanced 50/30/20 plan looks like this:
    """)

    targets = bucket_totals(income)
    cols = st.columns(3)
    for col, group in zip(cols, GROUPS):
        col.metric(GROUP_LABELS[group], money(targets[group]), f"{money(targets[group] / 12)} / month",
                   delta_color="off")

    col_back, col_own, col_rec = st.columns([1, 1, 1])
    with col_back:
        create_back_button(wizard, "wiz_rec_back")
    with col_own:
        if st.button("✏️ Build my own", disabled=wizard.loading):
            show_result(*wizard.decline_recommendation())
    with col_rec:
        if st.button("✨ Get recommendations", type="primary", disabled=wizard.loading):
            with st.spinner("Generating your budget..."):
                ok, error = wizard.accept_recommendation()
            show_result(ok, error)


def step_review(wizard: BudgetWizard):
    """Step 6: review and customize the budget"""
    st.markdown("""
    # 📋 Review & Customize Your Budget

    Adjust amounts and add custom categories to match your lifestyle.
    """)

    budget = wizard.prepare_review()
    view = st.radio("View", [VIEW_MONTHLY, VIEW_ANNUAL], horizontal=True,
                    format_func=str.capitalize, key="wiz_review_view")
    field_name = 'monthly_budget' if view == VIEW_MONTHLY else 'annual_budget'

    for group in GROUPS:
        entries = [e for e in budget.categories if e.group == group]
        if not entries:
            continue
        st.markdown(f"### {GROUP_LABELS[group]}")
        for entry in entries:
            col1, col2, col3 = st.columns([3, 2, 1])
            with col1:
                if entry.is_custom:
                    category = st.text_input("Category", value=entry.category, key=f"wiz_rc_{entry.id}")
                    subcategory = st.text_input("Subcategory", value=entry.subcategory, key=f"wiz_rs_{entry.id}")
                    entry_group = st.selectbox("Group", GROUPS, index=GROUPS.index(entry.group),
                                               format_func=GROUP_LABELS.get, key=f"wiz_rg_{entry.id}")
                    if (category, subcategory, entry_group) != (entry.category, entry.subcategory, entry.group):
                        wizard.update_field('budget', rename_entry(budget, entry.id, category, subcategory,
                                                                   entry_group))
                        if entry_group != group:
                            st.rerun()
                else:
                    st.markdown(f"**{entry.category}** · {entry.subcategory}")
            with col2:
                amount = st.number_input(view.capitalize(), min_value=0.0, value=float(getattr(entry, field_name)),
                                         step=100.0, key=f"wiz_amt_{entry.id}_{view}")
                if amount != getattr(entry, field_name):
                    wizard.update_field('budget', update_entry_amount(budget, entry.id, field_name, amount))
                    st.rerun()
            with col3:
                if entry.is_custom and st.button("🗑️", key=f"wiz_rm_{entry.id}"):
                    remove_entry(budget, entry.id)
                    wizard.update_field('budget', budget)
                    st.rerun()

    col_group, col_add = st.columns([2, 1])
    new_group = col_group.selectbox("Group for a new custom category", GROUPS, index=GROUPS.index(GROUP_LIFESTYLE),
                                    format_func=GROUP_LABELS.get, key="wiz_new_group")
    if col_add.button("➕ Add custom category"):
        add_custom_entry(budget, new_group)
        wizard.update_field('budget', budget)
        st.rerun()

    percentage = allocation_percentage(budget, view)
    col1, col2, col3 = st.columns(3)
    col1.metric("Income", money(income_for_view(budget, view)))
    col2.metric("Allocated", money(total_allocated(budget, view)), f"{percentage:.1f}%", delta_color="off")
    col3.metric("Remaining", money(remaining_income(budget, view)))
    st.plotly_chart(create_allocation_gauge(percentage))

    status = allocation_status(percentage)
    if status == STATUS_OVER:
        st.warning(f"⚠️ You have allocated {percentage:.1f}% of your income.")
    elif status == STATUS_SUCCESS:
        st.success("✅ Great! Almost every shilling has a job.")

    col_back, col_next = st.columns([1, 1])
    with col_back:
        create_back_button(wizard, "wiz_review_back")
    with col_next:
        if st.button("Continue →", type="primary", key="wiz_review_next"):
            show_result(*wizard.submit_budget(budget, view))


def step_confirmation(wizard: BudgetWizard):
    """Step 7: summary and final confirmation"""
    if st.session_state.get('wizard_completed'):
        st.success("🎉 Your budget has been created successfully!")
        st.balloons()
        if st.button("➕ Create another budget", type="primary"):
            clear_wizard_session(st.session_state)
            st.rerun()
        return

    st.markdown("""
    # 🚀 Your budget is ready

    Review the summary below and confirm to save it.
    """)

    summary = wizard.summary()
    budget = wizard.state.budget
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Annual Budget Goal", money(budget.total_income))
    col2.metric("Annual Savings", money(summary['savings']), f"{summary['savings_rate'] * 100:.1f}% of income",
                delta_color="off")
    col3.metric("Monthly Savings", money(summary['monthly_savings']))
    col4.metric("Budget Allocation", f"{summary['entry_count']} categories")

    st.plotly_chart(create_group_allocation_chart(summary))
    st.dataframe(budget_to_dataframe(budget).drop(columns=['id']), hide_index=True)
    st.download_button("📥 Download budget (CSV)", data=export_budget_csv(budget),
                       file_name="cashcompass_budget.csv", mime="text/csv")

    col_back, col_next = st.columns([1, 1])
    with col_back:
        create_back_button(wizard, "wiz_confirm_back")
    with col_next:
        if st.button("✅ Create my budget", type="primary", disabled=wizard.loading):
            with st.spinner("Saving your budget..."):
                ok, error = wizard.complete()
            show_result(ok, error)


STEP_RENDERERS = {
    1: step_priority,
    2: step_income,
    3: step_profile,
    4: step_categories,
    5: step_recommendation,
    6: step_review,
    7: step_confirmation,
}

wizard = get_wizard()

st.markdown("""
<div style='text-align: center; padding: 1rem; background: linear-gradient(90deg, #11998e 0%, #38ef7d 100%); border-radius: 10px; margin-bottom: 2rem;'>
    <h1 style='color: white; margin: 0;'>🧭 CashCompass Budget Wizard</h1>
    <p style='color: white; margin: 0; opacity: 0.9;'>Guided setup for your monthly budget</p>
</div>
""", unsafe_allow_html=True)

if st.session_state.get('wizard_cancelled'):
    st.info("Budget creation abandoned.")
    if st.button("Start again"):
        clear_wizard_session(st.session_state)
        st.rerun()
    st.stop()

create_progress_header(wizard)
STEP_RENDERERS[wizard.current_step](wizard)

st.markdown("---")

# Abandon with confirmation
if st.session_state.get('confirm_abandon'):
    st.warning("Are you sure you want to abandon creating this budget? All your progress will be lost.")
    col1, col2 = st.columns(2)
    if col1.button("Continue Creating"):
        st.session_state.confirm_abandon = False
        st.rerun()
    if col2.button("Yes, Abandon", type="primary"):
        st.session_state.confirm_abandon = False
        wizard.cancel()
        st.rerun()
elif not st.session_state.get('wizard_completed') and st.button("Cancel & Exit"):
    st.session_state.confirm_abandon = True
    st.rerun()
