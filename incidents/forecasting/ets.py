import logging
import warnings
from dataclasses import dataclass
from itertools import product
from typing import Dict, List, Optional, Union

import numpy as np
import pandas as pd
from statsmodels.tsa.exponential_smoothing.ets import ETSModel
from tqdm import tqdm

from ..config import ValidationConfig
from ..errors import ModelSelectionError
from ..types import ModelSpec, SelectedModel
from .forecast import BaseForecaster, future_periods

logger = logging.getLogger(__name__)

_ERRORS = ["add", "mul"]
_TRENDS = [(None, False), ("add", False), ("add", True)]
_SEASONALS = [None, "add", "mul"]

_CODES = {None: "N", "add": "A", "mul": "M"}


def spec_label(spec: ModelSpec) -> str:
    """ETS(error, trend, seasonal) notation, e.g. ETS(M,Ad,M)"""
    trend = _CODES[spec["trend"]] + ("d" if spec["damped_trend"] else "")
    return f"ETS({_CODES[spec['error']]},{trend},{_CODES[spec['seasonal']]})"


@dataclass
class ModelSelection:
    """Outcome of fitting every candidate to one series"""

    results: object  # statsmodels ETSResults of the selected model
    spec: ModelSpec
    score: float
    candidates: pd.DataFrame


class ETSForecaster(BaseForecaster):
    """Seasonal exponential smoothing with explicit model selection"""

    def __init__(
        self,
        forecast_horizon: int = 12,
        seasonal_period: int = 12,
        min_seasonal_cycles: int = 2,
        information_criterion: str = "aicc",
        validation_config: Optional[ValidationConfig] = None,
        candidates: Optional[List[ModelSpec]] = None,
        interval_level: float = 0.95,
    ):
        super().__init__(forecast_horizon, seasonal_period, min_seasonal_cycles, validation_config)
        if information_criterion not in ("aic", "aicc", "bic"):
            raise ValueError(f"Unknown information criterion: {information_criterion}")
        self.information_criterion = information_criterion
        self.candidates = candidates
        self.interval_level = interval_level

    def get_model_name(self) -> str:
        return "ETS"

    def candidate_specs(self, series: pd.Series) -> List[ModelSpec]:
        """
        Enumerate the model configurations to compare

        Multiplicative components need a strictly positive series. Additive
        errors are never paired with multiplicative seasonality.
        """
        if self.candidates is not None:
            return list(self.candidates)

        positive = bool((series > 0).all())
        specs: List[ModelSpec] = []
        for error, (trend, damped), seasonal in product(_ERRORS, _TRENDS, _SEASONALS):
            uses_mul = error == "mul" or seasonal == "mul"
            if uses_mul and not positive:
                continue
            if error == "add" and seasonal == "mul":
                continue
            specs.append({"error": error, "trend": trend, "damped_trend": damped, "seasonal": seasonal})
        return specs

    def fit_candidate(self, series: pd.Series, spec: ModelSpec):
        # Positional data: without zero-filling the month index can have gaps
        # Optimizer convergence warnings are expected for poorly suited candidates
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            model = ETSModel(
                series.to_numpy(dtype=float),
                error=spec["error"],
                trend=spec["trend"],
                damped_trend=spec["damped_trend"],
                seasonal=spec["seasonal"],
                seasonal_periods=self.seasonal_period if spec["seasonal"] else None,
            )
            return model.fit(disp=False)

    def fit_model(self, series: pd.Series) -> ModelSelection:
        """Fit every candidate and keep the one with the lowest information criterion"""
        rows: List[Dict[str, Union[str, float, bool, None]]] = []
        best: Optional[ModelSelection] = None

        for spec in tqdm(self.candidate_specs(series), desc="Fitting ETS candidates", leave=False):
            label = spec_label(spec)
            row: Dict[str, Union[str, float, bool, None]] = {"model": label, **spec}
            try:
                results = self.fit_candidate(series, spec)
                score = float(getattr(results, self.information_criterion))
                if not np.isfinite(score):
                    raise ValueError(f"non-finite {self.information_criterion}")
            except Exception as e:
                logger.warning(f"  Could not fit {label}: {e}")
                row.update({"aic": np.nan, "aicc": np.nan, "bic": np.nan, "error_message": str(e)})
                rows.append(row)
                continue

            row.update({"aic": results.aic, "aicc": results.aicc, "bic": results.bic, "error_message": None})
            rows.append(row)
            logger.debug(f"  {label}: {self.information_criterion}={score:.2f}")

            if best is None or score < best.score:
                best = ModelSelection(results=results, spec=spec, score=score, candidates=pd.DataFrame())

        if best is None:
            raise ModelSelectionError(f"None of {len(rows)} candidate models could be fitted")

        table = pd.DataFrame(rows)
        table["selected"] = table["model"] == spec_label(best.spec)
        best.candidates = table.sort_values(self.information_criterion, na_position="last").reset_index(drop=True)
        return best

    def fitted_values(self, model: ModelSelection, series: pd.Series) -> pd.Series:
        return pd.Series(np.asarray(model.results.fittedvalues, dtype=float), index=series.index, name="fitted")

    def predict(self, model: ModelSelection, series: pd.Series, steps: int) -> pd.DataFrame:
        nobs = len(series)
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            prediction = model.results.get_prediction(start=nobs, end=nobs + steps - 1)
            frame = prediction.summary_frame(alpha=1 - self.interval_level)

        return pd.DataFrame(
            {
                "ds": future_periods(series, steps),
                "y_pred": np.asarray(frame["mean"], dtype=float),
                "y_pred_lower": np.asarray(frame["pi_lower"], dtype=float),
                "y_pred_upper": np.asarray(frame["pi_upper"], dtype=float),
            }
        )

    def describe(self, model: ModelSelection) -> SelectedModel:
        return {
            "label": spec_label(model.spec),
            "spec": model.spec,
            "criterion": self.information_criterion,
            "score": model.score,
        }

    def candidate_table(self, model: ModelSelection) -> pd.DataFrame:
        return model.candidates
