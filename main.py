"""
Main entry point for the Spotlight ad planner.

The page moves through idle -> analyzing -> analysis_complete ->
generating_ads -> results. Everything the user builds lives in
st.session_state.
"""
import logging
from dataclasses import replace
import streamlit as st

from config.settings import config_manager
from business_logic.budget_session import campaign_duration_days, selected_audience_size
from business_logic.campaign_controller import AdSetStore, CampaignController
from business_logic.error_handler import error_handler
from models.data_models import AdSet, AnalysisResult
from ui.components import (
    AdResultsComponent,
    AdSetExportComponent,
    AnalysisSummaryComponent,
    CampaignBriefForm,
    SavedAdSetsComponent,
    display_notification,
)

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

IDLE = "idle"
ANALYZING = "analyzing"
ANALYSIS_COMPLETE = "analysis_complete"
GENERATING_ADS = "generating_ads"
RESULTS = "results"


def init_session_state():
    """Set defaults for everything the page keeps between reruns."""
    defaults = {
        'page_state': IDLE,
        'analysis_result': None,
        'current_ad_set': None,
        'selected_interests': [],
        'ad_set_store': AdSetStore(),
        'notification': None,
    }
    for key, value in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = value


def get_controller() -> CampaignController:
    if 'controller' not in st.session_state:
        st.session_state['controller'] = CampaignController()
    return st.session_state['controller']


def start_over():
    """Clear the current analysis and ad set, keeping saved ad sets."""
    st.session_state['page_state'] = IDLE
    st.session_state['analysis_result'] = None
    st.session_state['current_ad_set'] = None
    st.session_state['selected_interests'] = []
    st.session_state['notification'] = None


def load_ad_set(ad_set: AdSet):
    """Reopen a saved ad set with its saved interests selected."""
    st.session_state['campaign_brief'] = ad_set.campaign_brief
    st.session_state['analysis_result'] = AnalysisResult(profile_data=ad_set.profile_data, analysis=ad_set.analysis)
    st.session_state['current_ad_set'] = ad_set
    st.session_state['selected_interests'] = list(ad_set.meta_interests)
    st.session_state['page_state'] = RESULTS


def run_analysis(controller: CampaignController, brief):
    st.session_state['page_state'] = ANALYZING
    with st.spinner("🔍 Fetching profile and analyzing brand voice..."):
        success, result, message, notification = controller.analyze_profile(brief)

    if success:
        st.session_state['analysis_result'] = result
        st.session_state['current_ad_set'] = None
        st.session_state['selected_interests'] = []
        st.session_state['page_state'] = ANALYSIS_COMPLETE
        st.session_state['notification'] = {'type': 'success', 'title': 'Analysis Complete', 'message': message}
        logger.info(message)
    else:
        st.session_state['page_state'] = IDLE
        st.session_state['notification'] = notification


def run_generation(controller: CampaignController, brief):
    st.session_state['page_state'] = GENERATING_ADS
    with st.spinner("🤖 Writing ad variations and finding interests..."):
        success, ad_set, message, notification = controller.generate_ads(st.session_state['analysis_result'], brief)

    if success:
        st.session_state['current_ad_set'] = ad_set
        st.session_state['selected_interests'] = []
        st.session_state['page_state'] = RESULTS
        st.session_state['notification'] = notification or {
            'type': 'success', 'title': 'Ads Generated', 'message': message
        }
    else:
        st.session_state['page_state'] = ANALYSIS_COMPLETE
        st.session_state['notification'] = notification


def render_results(controller: CampaignController, ad_set: AdSet):
    brief = ad_set.campaign_brief
    config = config_manager.load_config()
    selected = st.session_state['selected_interests']

    audience_size = selected_audience_size(selected, config.default_audience_size)
    duration_days = campaign_duration_days(brief.start_date, brief.end_date)

    actions = AdResultsComponent().render(ad_set, selected, audience_size, duration_days)

    if 'refresh' in actions:
        index = actions['refresh']
        with st.spinner(f"🔄 Refreshing variation {index + 1}..."):
            success, updated, message, notification = controller.refresh_variation(ad_set, index)
        if success:
            st.session_state['current_ad_set'] = updated
            st.session_state['notification'] = {'type': 'success', 'title': 'Variation Refreshed', 'message': message}
        else:
            st.session_state['notification'] = notification
        st.rerun()

    if 'edit' in actions:
        index, variation = actions['edit']
        variations = list(ad_set.variations)
        variations[index] = variation
        st.session_state['current_ad_set'] = replace(ad_set, variations=variations)
        st.rerun()

    col1, col2 = st.columns(2)
    with col1:
        if st.button("💾 Save Ad Set", type="primary", use_container_width=True):
            _, created = st.session_state['ad_set_store'].save(ad_set, selected)
            st.session_state['notification'] = {
                'type': 'success',
                'title': 'Ad Set Saved' if created else 'Ad Set Updated',
                'message': f"Saved with {len(selected)} selected interests."
            }
            st.rerun()
    with col2:
        if st.button("🔁 Start Over", use_container_width=True):
            start_over()
            st.rerun()

    AdSetExportComponent().render(ad_set, selected, actions['estimates'])


def main():
    """Main application entry point."""
    st.set_page_config(
        page_title="Spotlight",
        page_icon="🔦",
        layout="wide",
        initial_sidebar_state="expanded"
    )

    st.title("🔦 Spotlight")
    st.markdown("Turn an Instagram profile into Meta ad copy, targeting and a budget")

    init_session_state()

    try:
        controller = get_controller()
    except ValueError as e:
        st.error(f"❌ Configuration Error: {e}")
        st.info("Set OPENROUTER_API_KEY in your environment, .env file or Streamlit secrets.")
        st.stop()

    with st.sidebar:
        loaded = SavedAdSetsComponent().render(st.session_state['ad_set_store'].ad_sets)
        if loaded is not None:
            load_ad_set(loaded)
            st.rerun()

    notification = st.session_state.get('notification')
    if notification:
        if notification.get('type') == 'success':
            st.success(f"✅ {notification.get('message', '')}")
        else:
            display_notification(notification)
        st.session_state['notification'] = None

    page_state = st.session_state['page_state']
    busy = page_state in (ANALYZING, GENERATING_ADS)

    brief, submitted = CampaignBriefForm().render(disabled=busy)
    if submitted:
        run_analysis(controller, brief)
        st.rerun()

    analysis_result = st.session_state['analysis_result']
    if analysis_result is None or page_state == IDLE:
        return

    edited = AnalysisSummaryComponent().render(analysis_result, st.session_state.get('campaign_brief'))
    if edited is not None:
        result, ad_set = controller.update_analysis(analysis_result, edited, st.session_state['current_ad_set'])
        st.session_state['analysis_result'] = result
        st.session_state['current_ad_set'] = ad_set
        st.rerun()

    if page_state == ANALYSIS_COMPLETE:
        if st.button("🚀 Generate Ads", type="primary", use_container_width=True):
            run_generation(controller, st.session_state['campaign_brief'])
            st.rerun()

    ad_set = st.session_state['current_ad_set']
    if page_state == RESULTS and ad_set is not None:
        render_results(controller, ad_set)

    with st.expander("System Information"):
        config = config_manager.load_config()
        col1, col2 = st.columns(2)
        with col1:
            st.write(f"**Model:** {config.llm_model}")
            st.write(f"**Currency:** {config.currency_symbol}")
        with col2:
            st.write(f"**Meta interests:** {'enabled' if config.meta_api_key else 'disabled (no token)'}")
            st.write(f"**AI calls this session:** {controller.ai_generator.get_usage_summary()['calls']}")

        stats = error_handler.get_error_statistics()
        st.write(f"**Errors logged:** {stats['total_errors']}")
        if stats['total_errors']:
            st.write(f"**Last 24h by category:** {stats['category_breakdown']}")
            st.write(f"**Rate limits hit:** {stats['rate_limit_info'].get('count', 0)}")


if __name__ == "__main__":
    main()
