"""
UI components for the Spotlight ad planner.
"""

import streamlit as st
from typing import Dict, Any, List, Optional, Tuple
from dataclasses import replace
from datetime import date, timedelta
import logging
import pandas as pd

from models.data_models import (
    AdGoal, AdSet, AdVariation, AnalysisResult, CampaignBrief, MetaInterest, ProfileAnalysis, QualityTier
)
from business_logic.budget_session import BudgetCalculatorState, SLIDER_STEP
from business_logic.campaign_controller import toggle_interest
from business_logic.campaign_validator import CampaignValidator
from config.settings import config_manager
from services.meta_interests import filter_for_keywords, group_by_search_term
from ui.formatting import format_audience_size, format_cpr, format_currency, format_number

logger = logging.getLogger(__name__)

GOAL_LABELS = {
    AdGoal.TRAFFIC.value: "Website Traffic",
    AdGoal.LEADS.value: "Lead Generation",
    AdGoal.SALES.value: "Sales",
    AdGoal.OTHER.value: "Other",
}


def display_notification(notification: Optional[Dict[str, Any]]):
    """Render a notification dict produced by the error handler."""
    if not notification:
        return

    level = notification.get('type', 'info')
    text = f"**{notification.get('title', '')}**\n\n{notification.get('message', '')}"
    if level == 'error':
        st.error(text)
    elif level == 'warning':
        st.warning(text)
    else:
        st.info(text)

    if notification.get('action'):
        st.caption(f"💡 {notification['action']}")


def display_validation_errors(errors: Dict[str, str]):
    """Show validation errors inline, one per field."""
    if not errors:
        return
    st.error("❌ **Please fix the following:**")
    for message in errors.values():
        st.error(f"• {message}")


class CampaignBriefForm:
    """
    Form collecting the Instagram handle and campaign brief.

    Dates are optional for analysis but required before ads are generated.
    """

    def __init__(self, validator: Optional[CampaignValidator] = None):
        self.validator = validator or CampaignValidator()

    def render(self, disabled: bool = False) -> Tuple[Optional[CampaignBrief], bool]:
        """
        Render the brief form.

        Returns:
            Tuple of (brief, submitted_and_valid)
        """
        previous: Optional[CampaignBrief] = st.session_state.get('campaign_brief')
        goal_options = list(GOAL_LABELS.keys())

        with st.form("campaign_brief_form", clear_on_submit=False):
            username = st.text_input(
                "Instagram Username or URL *",
                value=previous.username if previous else "",
                placeholder="e.g. @yourbrand or https://instagram.com/yourbrand",
                disabled=disabled
            )

            col1, col2 = st.columns(2)
            with col1:
                project_name = st.text_input(
                    "Project Name",
                    value=previous.project_name if previous else "",
                    disabled=disabled
                )
                ad_goal = st.selectbox(
                    "Ad Goal *",
                    options=goal_options,
                    index=goal_options.index(previous.ad_goal) if previous and previous.ad_goal in goal_options else 0,
                    format_func=lambda value: GOAL_LABELS[value],
                    disabled=disabled
                )
                custom_ad_goal = st.text_input(
                    "Custom Goal (if Other)",
                    value=previous.custom_ad_goal if previous else "",
                    disabled=disabled
                )

            with col2:
                start_date = st.date_input(
                    "Campaign Start Date",
                    value=previous.start_date if previous and previous.start_date else date.today(),
                    disabled=disabled
                )
                end_date = st.date_input(
                    "Campaign End Date",
                    value=previous.end_date if previous and previous.end_date else date.today() + timedelta(days=13),
                    disabled=disabled
                )
                locations = st.text_input(
                    "Target Locations",
                    value=", ".join(previous.locations) if previous else "",
                    placeholder="Comma separated. Leave blank for pan-India metro regions",
                    disabled=disabled
                )

            business_snapshot = st.text_area(
                "Business Snapshot",
                value=previous.business_snapshot if previous else "",
                placeholder="What do you sell, who buys it, and what makes you different?",
                help="Treated as the source of truth over anything scraped from the profile",
                disabled=disabled
            )

            submitted = st.form_submit_button("Analyze Profile", type="primary", disabled=disabled)

        brief = CampaignBrief(
            username=username.strip(),
            ad_goal=ad_goal,
            project_name=project_name.strip(),
            business_snapshot=business_snapshot.strip(),
            custom_ad_goal=custom_ad_goal.strip(),
            start_date=start_date,
            end_date=end_date,
            locations=_split_csv(locations),
        )

        if not submitted:
            return brief, False

        result = self.validator.validate_brief(brief)
        if not result.is_valid:
            display_validation_errors(result.messages_by_field())
            return brief, False

        st.session_state['campaign_brief'] = brief
        return brief, True


class AnalysisSummaryComponent:
    """Profile header, AI analysis and an editor for the analysis."""

    def render(self, analysis_result: AnalysisResult, brief: Optional[CampaignBrief] = None) -> Optional[ProfileAnalysis]:
        """
        Render the summary.

        Returns:
            Edited ProfileAnalysis when the user saved changes, otherwise None
        """
        info = analysis_result.profile_data.profile_info
        analysis = analysis_result.analysis

        st.subheader(f"📊 Analysis: @{info.username}")

        col1, col2, col3, col4 = st.columns(4)
        col1.metric("Followers", format_audience_size(info.followers))
        col2.metric("Posts", format_number(info.num_posts))
        col3.metric("Niche", analysis.niche or "N/A")
        goal_display = None
        if brief:
            goal_display = brief.custom_ad_goal if brief.ad_goal == AdGoal.OTHER.value else GOAL_LABELS.get(brief.ad_goal)
        col4.metric("Ad Goal", goal_display or "N/A")

        if info.biography:
            st.caption(info.biography)

        st.write(analysis.summary)
        st.write("**Target audience keywords:** " + ", ".join(analysis.target_audience_keywords))
        if analysis.potential_targets:
            st.write("**Potential targets:** " + ", ".join(analysis.potential_targets))

        with st.expander("✏️ Edit Analysis"):
            with st.form("analysis_editor"):
                summary = st.text_area("Summary", value=analysis.summary)
                niche = st.text_input("Niche", value=analysis.niche)
                keywords = st.text_input(
                    "Target Audience Keywords (comma separated, max 5)",
                    value=", ".join(analysis.target_audience_keywords)
                )
                targets = st.text_input(
                    "Potential Targets (comma separated)",
                    value=", ".join(analysis.potential_targets)
                )
                saved = st.form_submit_button("Save Analysis")

            if saved:
                edited = ProfileAnalysis(
                    summary=summary.strip(),
                    niche=niche.strip(),
                    target_audience_keywords=_split_csv(keywords)[:5],
                    potential_targets=_split_csv(targets),
                )
                st.success("✅ Analysis updated")
                return edited

        return None


def _split_csv(value: str) -> List[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


class AdPreviewComponent:
    """Feed-style preview of one variation."""

    def render(self, ad_set: AdSet, variation: AdVariation):
        info = ad_set.profile_data.profile_info
        with st.container(border=True):
            col1, col2 = st.columns([1, 6])
            if info.profile_pic_url:
                col1.image(info.profile_pic_url, width=40)
            col2.markdown(f"**{info.username}**  \nSponsored")

            st.write(variation.primary_text)

            posts = ad_set.profile_data.recent_posts
            if posts:
                st.image(posts[0].display_url, use_container_width=True)

            st.markdown(f"**{variation.headline}**")
            st.caption(variation.description)


class AdEditorComponent:
    """Edit the copy of one variation."""

    def render(self, key: str, variation: AdVariation) -> Optional[AdVariation]:
        with st.form(f"ad_editor_{key}"):
            headline = st.text_input("Headline", value=variation.headline)
            primary_text = st.text_area("Primary Text", value=variation.primary_text)
            description = st.text_input("Description", value=variation.description)
            saved = st.form_submit_button("Save Changes")

        if saved:
            return replace(
                variation,
                headline=headline.strip(),
                primary_text=primary_text.strip(),
                description=description.strip(),
            )
        return None


class BudgetCalculatorComponent:
    """
    Budget estimator for one ad variation.

    The BudgetCalculatorState lives in st.session_state so the manual or
    suggested mode survives reruns. Widget callbacks drive the transitions.
    """

    def render(self, key: str, goal: str, audience_size: int, duration_days: int) -> Optional[Any]:
        """
        Render the calculator.

        Args:
            key: Unique key for this variation's calculator
            goal: Campaign goal from the brief
            audience_size: Combined audience of the selected interests
            duration_days: Campaign duration in days

        Returns:
            Current EstimationResult, or None before any result
        """
        state = self._get_state(key, goal, audience_size, duration_days)
        state_key = self._state_key(key)
        tier_key = f"{state_key}_tier"
        slider_key = f"{state_key}_slider"
        input_key = f"{state_key}_input"

        st.markdown("#### 💰 Budget Estimator")
        st.caption("Select a budget tier for a suggestion, then adjust your ad spend based on your goals.")

        # Sync widgets with the calculator before they are instantiated
        budget_value = int(state.total_budget)
        st.session_state[tier_key] = state.quality_tier.value
        st.session_state[slider_key] = min(budget_value, state.slider_max)
        st.session_state[input_key] = budget_value

        st.radio(
            "Budget Tier",
            options=[tier.value for tier in QualityTier],
            format_func=str.title,
            key=tier_key,
            horizontal=True,
            on_change=self._on_tier_change,
            args=(state_key, tier_key),
            help="'Low' is for testing, 'Medium' is balanced, and 'High' is for maximum reach."
        )

        col1, col2 = st.columns([4, 1])
        with col1:
            st.slider(
                "Total Budget",
                min_value=0,
                max_value=state.slider_max,
                step=SLIDER_STEP,
                key=slider_key,
                on_change=self._on_budget_edit,
                args=(state_key, slider_key),
            )
        with col2:
            st.number_input(
                "Amount",
                min_value=0,
                step=SLIDER_STEP,
                key=input_key,
                on_change=self._on_budget_edit,
                args=(state_key, input_key),
            )

        if state.error:
            st.warning(f"⚠️ {state.error.message}")

        has_result = state.has_result
        col1, col2, col3, col4 = st.columns(4)
        col1.metric("Total Budget", format_currency(state.total_budget) if has_result else "...")
        col2.metric("Daily Budget", format_currency(state.daily_budget) if has_result else "...")
        col3.metric("Expected Actions", format_number(state.expected_actions))
        col4.metric("Cost per Result", format_cpr(state.cost_per_result))

        if state.is_manual:
            st.caption(f"Using your budget. Over {duration_days} days.")
            st.button("Use Suggested Budget", key=f"{state_key}_reset",
                      on_click=self._on_reset, args=(state_key,))
        else:
            st.caption(f"Suggested for {format_audience_size(audience_size)} people over {duration_days} days.")

        return state.snapshot()

    @staticmethod
    def _state_key(key: str) -> str:
        return f"budget_state_{key}"

    def _get_state(self, key: str, goal: str, audience_size: int, duration_days: int) -> BudgetCalculatorState:
        state_key = self._state_key(key)
        state: Optional[BudgetCalculatorState] = st.session_state.get(state_key)

        if state is None:
            state = BudgetCalculatorState(
                goal=goal,
                audience_size=audience_size,
                duration_days=duration_days,
                allow_goal_fallback=config_manager.load_config().allow_goal_fallback,
            )
            st.session_state[state_key] = state
        elif (state.goal, state.audience_size, state.duration_days) != (goal, audience_size, duration_days):
            state.update_inputs(goal=goal, audience_size=audience_size, duration_days=duration_days)

        return state

    @staticmethod
    def _on_budget_edit(state_key: str, widget_key: str):
        st.session_state[state_key].edit_budget(st.session_state.get(widget_key))

    @staticmethod
    def _on_tier_change(state_key: str, widget_key: str):
        st.session_state[state_key].change_quality_tier(st.session_state[widget_key])

    @staticmethod
    def _on_reset(state_key: str):
        st.session_state[state_key].reset_to_suggestion()


class InterestBrowserComponent:
    """Interests found for a variation's keywords, grouped by keyword, with selection."""

    def render(self, key: str, interests: List[MetaInterest]):
        """
        Render interests as checkboxes bound to st.session_state['selected_interests'].

        Args:
            key: Unique key for this variation
            interests: Interests found for the variation's keywords
        """
        st.markdown("#### 🎯 Meta Interests")

        if not interests:
            st.info("No Meta interests found for this variation's keywords.")
            return

        selected_ids = {interest.id for interest in st.session_state.get('selected_interests', [])}

        for search_term, group in group_by_search_term(interests).items():
            with st.expander(f"{search_term} ({len(group)})"):
                for interest in group:
                    checkbox_key = f"interest_{key}_{interest.id}"
                    # The same interest can appear under several variations
                    st.session_state[checkbox_key] = interest.id in selected_ids

                    col1, col2, col3 = st.columns([4, 2, 1])
                    col1.checkbox(
                        interest.name,
                        key=checkbox_key,
                        help=interest.topic or None,
                        on_change=self._on_toggle,
                        args=(interest,),
                    )
                    col2.caption(format_audience_size(interest.audience_size))
                    col3.link_button("↗", interest.link)

    @staticmethod
    def _on_toggle(interest: MetaInterest):
        selected = st.session_state.get('selected_interests', [])
        st.session_state['selected_interests'] = toggle_interest(selected, interest)

    def render_selection_summary(self, selected: List[MetaInterest]):
        if not selected:
            return
        total = sum(interest.audience_size or 0 for interest in selected)
        st.success(f"✅ {len(selected)} interests selected, combined audience {format_audience_size(total)}")
        st.write(", ".join(f"{interest.name} ({format_audience_size(interest.audience_size)})" for interest in selected))


class AdResultsComponent:
    """
    Tabs with one ad variation each: preview, editor, budget and interests.
    """

    def __init__(self):
        self.preview = AdPreviewComponent()
        self.editor = AdEditorComponent()
        self.budget = BudgetCalculatorComponent()
        self.interests = InterestBrowserComponent()

    def render(self, ad_set: AdSet, selected: List[MetaInterest], audience_size: int,
               duration_days: int) -> Dict[str, Any]:
        """
        Render all variations.

        Returns:
            Dictionary of requested actions: 'refresh' (index), 'edit' ((index, variation))
            and 'estimates' (index -> EstimationResult)
        """
        actions: Dict[str, Any] = {'estimates': {}}
        st.subheader(f"📢 Ad Variations for @{ad_set.username}")

        self.interests.render_selection_summary(selected)

        tabs = st.tabs([f"Variation {index + 1}" for index in range(len(ad_set.variations))])
        for index, (tab, variation) in enumerate(zip(tabs, ad_set.variations)):
            key = f"{ad_set.id}_{index}"
            with tab:
                col1, col2 = st.columns([3, 2])
                with col1:
                    self.preview.render(ad_set, variation)
                    if st.button("🔄 Refresh Variation", key=f"refresh_{key}"):
                        actions['refresh'] = index
                    with st.expander("✏️ Edit Copy"):
                        edited = self.editor.render(key, variation)
                        if edited is not None:
                            actions['edit'] = (index, edited)

                with col2:
                    st.write("**Keywords:** " + ", ".join(variation.target_audience_keywords))
                    if variation.potential_targets:
                        st.write("**Targets:** " + ", ".join(variation.potential_targets))

                    actions['estimates'][index] = self.budget.render(
                        key, ad_set.campaign_brief.ad_goal, audience_size, duration_days
                    )

                variation_interests = filter_for_keywords(ad_set.meta_interests, variation.target_audience_keywords)
                self.interests.render(key, variation_interests)

        return actions


class AdSetExportComponent:
    """CSV exports of an ad set built with pandas."""

    def build_variations_frame(self, ad_set: AdSet, estimates: Optional[Dict[int, Any]] = None) -> pd.DataFrame:
        estimates = estimates or {}
        rows = []
        for index, variation in enumerate(ad_set.variations):
            estimate = estimates.get(index)
            rows.append({
                'Variation': index + 1,
                'Headline': variation.headline,
                'Primary Text': variation.primary_text,
                'Description': variation.description,
                'Keywords': '; '.join(variation.target_audience_keywords),
                'Potential Targets': '; '.join(variation.potential_targets),
                'Total Budget': estimate.total_budget if estimate else None,
                'Daily Budget': estimate.daily_budget if estimate else None,
                'Expected Actions': estimate.expected_actions if estimate else None,
                'Cost per Result': estimate.cost_per_result if estimate else None,
            })
        return pd.DataFrame(rows)

    def build_interests_frame(self, interests: List[MetaInterest]) -> pd.DataFrame:
        return pd.DataFrame([
            {
                'ID': interest.id,
                'Name': interest.name,
                'Audience Size': interest.audience_size,
                'Topic': interest.topic,
                'Keyword': interest.search_term,
                'Link': interest.link,
            }
            for interest in interests
        ], columns=['ID', 'Name', 'Audience Size', 'Topic', 'Keyword', 'Link'])

    def render(self, ad_set: AdSet, selected: List[MetaInterest], estimates: Optional[Dict[int, Any]] = None):
        st.subheader("📥 Export")
        col1, col2 = st.columns(2)
        with col1:
            st.download_button(
                "📄 Ad Variations (CSV)",
                data=self.build_variations_frame(ad_set, estimates).to_csv(index=False),
                file_name=f"{ad_set.username}_ad_variations.csv",
                mime="text/csv",
                use_container_width=True
            )
        with col2:
            st.download_button(
                "🎯 Selected Interests (CSV)",
                data=self.build_interests_frame(selected).to_csv(index=False),
                file_name=f"{ad_set.username}_interests.csv",
                mime="text/csv",
                use_container_width=True,
                disabled=not selected
            )


class SavedAdSetsComponent:
    """List of saved ad sets with a load action."""

    def render(self, ad_sets: List[AdSet]) -> Optional[AdSet]:
        """
        Render saved ad sets.

        Returns:
            The ad set the user chose to load, if any
        """
        st.subheader("💾 Saved Ad Sets")
        if not ad_sets:
            st.info("No saved ad sets yet.")
            return None

        for ad_set in ad_sets:
            brief = ad_set.campaign_brief
            title = brief.project_name or f"@{ad_set.username}"
            with st.expander(f"{title} · {GOAL_LABELS.get(brief.ad_goal, brief.ad_goal)}"):
                st.caption(f"Saved {ad_set.id}")
                st.write(f"**{len(ad_set.variations)} variations**, {len(ad_set.meta_interests)} interests")
                for interest in ad_set.meta_interests:
                    st.write(f"• {interest.name} ({format_audience_size(interest.audience_size)})")
                if st.button("Load", key=f"load_{ad_set.id}"):
                    return ad_set
        return None
