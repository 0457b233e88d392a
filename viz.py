from typing import Any, Dict

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

from incidents import MonthlyAggregator, PipelineConfig, PipelineError, PipelineResult, ResultsReporter, run_pipeline
from incidents.config import DEFAULT_SOURCE_URL
from incidents.pipeline import MODEL_CHOICES

# Configure Streamlit page
st.set_page_config(
    page_title="Incident Trends",
    layout="wide",
    initial_sidebar_state="expanded",
)

MAP_SAMPLE_SIZE = 5000


@st.cache_data(show_spinner=False)
def load_results(source: str, model: str, criterion: str, fill_gaps: bool) -> PipelineResult:
    config = PipelineConfig(source_url=source, information_criterion=criterion, fill_missing_months=fill_gaps)
    return run_pipeline(config, source=source, model=model)


class IncidentDashboard:
    """
    Incident trend dashboard using Streamlit and Plotly
    """

    def __init__(self):
        self.colors = {"historical": "#2E86AB", "fitted": "#6C757D", "forecast": "#F18F01", "lethal": "#C0392B"}

    def create_filters_sidebar(self) -> Dict[str, Any]:
        st.sidebar.header("Run settings")
        return {
            "source": st.sidebar.text_input("Data source (URL or path)", value=DEFAULT_SOURCE_URL),
            "model": st.sidebar.selectbox("Forecaster", list(MODEL_CHOICES)),
            "criterion": st.sidebar.selectbox("Selection criterion", ["aicc", "aic", "bic"]),
            "fill_gaps": st.sidebar.checkbox("Zero-fill empty months", value=True),
            "show_confidence": st.sidebar.checkbox("Show 95% prediction interval", value=True),
        }

    def display_key_metrics(self, result: PipelineResult) -> None:
        stats = ResultsReporter(result.cleaned, result.series, result.forecast).summary_statistics()
        col1, col2, col3, col4 = st.columns(4)
        with col1:
            st.metric("Incidents", f"{stats['incidents']:,}")
        with col2:
            st.metric("Lethal share", f"{stats['lethal_share']:.1%}")
        with col3:
            st.metric("Dropped (no location)", f"{result.report.missing_coordinates:,}")
        with col4:
            st.metric("Selected model", result.forecast["selected"]["label"])

    def create_time_series_chart(self, result: PipelineResult, filters: Dict[str, Any]) -> None:
        """Monthly counts with in-sample fit and forecast"""
        st.subheader("Monthly incidents")
        final = ResultsReporter(result.cleaned, result.series, result.forecast).create_final_dataset()
        historical = final[~final["is_forecast"]]
        forecast = final[final["is_forecast"]]

        fig = go.Figure()
        fig.add_trace(
            go.Scatter(
                x=historical["ds"],
                y=historical["incidents"],
                mode="lines+markers",
                name="Observed",
                line=dict(color=self.colors["historical"], width=2),
                marker=dict(size=4),
            )
        )
        fig.add_trace(
            go.Scatter(
                x=historical["ds"],
                y=historical["fitted"],
                mode="lines",
                name="Fitted",
                line=dict(color=self.colors["fitted"], width=1, dash="dot"),
            )
        )
        fig.add_trace(
            go.Scatter(
                x=forecast["ds"],
                y=forecast["y_pred"],
                mode="lines+markers",
                name="Forecast",
                line=dict(color=self.colors["forecast"], width=2, dash="dash"),
                marker=dict(size=4),
            )
        )

        if filters["show_confidence"]:
            # Upper bound (invisible line), then lower bound filled up to it
            fig.add_trace(
                go.Scatter(
                    x=forecast["ds"],
                    y=forecast["y_pred_upper"],
                    mode="lines",
                    line=dict(width=0, color="rgba(241, 143, 1, 0)"),
                    showlegend=False,
                    hoverinfo="skip",
                )
            )
            fig.add_trace(
                go.Scatter(
                    x=forecast["ds"],
                    y=forecast["y_pred_lower"],
                    mode="lines",
                    line=dict(width=0, color="rgba(241, 143, 1, 0)"),
                    fill="tonexty",
                    fillcolor="rgba(241, 143, 1, 0.2)",
                    name="95% interval",
                )
            )

        fig.update_layout(
            xaxis_title="Month",
            yaxis_title="Incidents",
            hovermode="x unified",
            height=500,
            legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="right", x=1),
        )
        st.plotly_chart(fig, width="stretch")

        if result.forecast["negative_periods"]:
            st.warning(f"{result.forecast['negative_periods']} forecast month(s) fall below zero; shown unclamped.")
        if result.filled_months:
            st.info(f"{result.filled_months} month(s) without recorded incidents were zero-filled.")

    def create_hourly_chart(self, cleaned: pd.DataFrame) -> None:
        hourly = MonthlyAggregator.hourly_profile(cleaned)
        fig = go.Figure(go.Bar(x=hourly["hour"], y=hourly["incidents"], marker_color=self.colors["historical"]))
        fig.update_layout(title="Incidents by hour of day", xaxis_title="Hour", yaxis_title="Incidents", height=400)
        st.plotly_chart(fig, width="stretch")

    def create_yearly_chart(self, cleaned: pd.DataFrame) -> None:
        yearly = MonthlyAggregator.yearly_totals(cleaned)
        fig = go.Figure()
        fig.add_trace(
            go.Bar(x=yearly["year"], y=yearly["incidents"] - yearly["lethal"], name="Non-lethal or unclassified")
        )
        fig.add_trace(go.Bar(x=yearly["year"], y=yearly["lethal"], name="Lethal", marker_color=self.colors["lethal"]))
        fig.update_layout(barmode="stack", title="Incidents per year", xaxis_title="Year", height=400)
        st.plotly_chart(fig, width="stretch")

    def create_location_map(self, cleaned: pd.DataFrame) -> None:
        st.subheader("Incident locations")
        sample = cleaned.sample(min(len(cleaned), MAP_SAMPLE_SIZE), random_state=0) if len(cleaned) else cleaned
        lethal = sample["is_lethal"].fillna(False).astype(bool)

        fig = go.Figure()
        layers = [
            (False, "Non-lethal or unclassified", self.colors["historical"]),
            (True, "Lethal", self.colors["lethal"]),
        ]
        for flag, name, color in layers:
            subset = sample[lethal == flag]
            fig.add_trace(
                go.Scattermapbox(
                    lat=subset["latitude"],
                    lon=subset["longitude"],
                    mode="markers",
                    marker=dict(size=4, color=color, opacity=0.5),
                    name=name,
                )
            )
        fig.update_layout(
            mapbox=dict(
                style="carto-positron",
                center=dict(lat=float(sample["latitude"].mean()), lon=float(sample["longitude"].mean())),
                zoom=9,
            ),
            height=600,
            margin=dict(l=0, r=0, t=0, b=0),
        )
        st.plotly_chart(fig, width="stretch")
        if len(cleaned) > MAP_SAMPLE_SIZE:
            st.caption(f"Showing a random sample of {MAP_SAMPLE_SIZE:,} of {len(cleaned):,} incidents")

    def create_model_table(self, result: PipelineResult) -> None:
        st.subheader("Model selection")
        candidates = result.forecast["candidates"]
        if candidates.empty:
            st.write(f"Fixed model: {result.forecast['selected']['label']}")
        else:
            st.dataframe(candidates, hide_index=True)

        metrics = pd.DataFrame(
            {"in-sample": result.forecast["accuracy"], "holdout": result.forecast["validation_metrics"] or {}}
        )
        st.dataframe(metrics)

    def run_dashboard(self) -> None:
        """
        Main function to run the complete dashboard
        """
        st.title("Shooting Incident Trends")
        st.markdown("*Monthly incident counts with a seasonal exponential-smoothing forecast*")
        st.markdown("---")

        filters = self.create_filters_sidebar()

        with st.spinner("Running pipeline..."):
            try:
                result = load_results(filters["source"], filters["model"], filters["criterion"], filters["fill_gaps"])
            except PipelineError as e:
                st.error(f"Pipeline failed: {e}")
                st.stop()

        self.display_key_metrics(result)
        self.create_time_series_chart(result, filters)
        col1, col2 = st.columns(2)
        with col1:
            self.create_hourly_chart(result.cleaned)
        with col2:
            self.create_yearly_chart(result.cleaned)
        self.create_location_map(result.cleaned)
        self.create_model_table(result)

        st.markdown("---")
        st.markdown("*Built with Streamlit & Plotly*")


def main():
    """
    Entry point for the Streamlit application
    """
    dashboard = IncidentDashboard()
    dashboard.run_dashboard()


if __name__ == "__main__":
    main()
