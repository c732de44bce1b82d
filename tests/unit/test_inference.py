"""
Unit Tests for Inference Module

Tests for the naive Bayes and SVM scorers, the ensemble and the ABPS facade.
"""
import math
import warnings

import numpy as np
import pandas as pd
import pytest

from bloodpassport import abps
from bloodpassport.core.errors import MissingVariablesError, NumericalPrecisionWarning
from bloodpassport.core.inference import (
    ABPSScorer,
    BayesScorer,
    ProfileInterpretation,
    SVMScorer,
    bin_index,
    combine,
    rbf_kernel,
)
from bloodpassport.core.markers import MARKERS
from bloodpassport.core.normalization import MarkerBatch
from bloodpassport.core.parameters import BayesParameters


class TestBinIndex:
    """Bin lookup against ascending thresholds."""

    edges = np.array([10.0, 14.0, 17.0])

    def test_inside(self):
        assert bin_index(15.2, self.edges) == 1

    def test_value_on_threshold_selects_higher_bin(self):
        assert bin_index(14.0, self.edges) == 1
        assert bin_index(13.999, self.edges) == 0

    def test_last_bin(self):
        assert bin_index(17.0, self.edges) == 2
        assert bin_index(250.0, self.edges) == 2

    def test_first_edge(self):
        assert bin_index(10.0, self.edges) == 0

    def test_below_all_thresholds(self):
        assert bin_index(9.9, self.edges) is None

    def test_missing(self):
        assert bin_index(float("nan"), self.edges) is None


class TestBayesScorer:
    """Tests for BayesScorer."""

    def test_reference_sample(self, bayes_parameters, reference_vector, expected):
        scorer = BayesScorer(bayes_parameters)
        batch = MarkerBatch.coerce(reference_vector)
        assert scorer.score(batch)[0] == pytest.approx(expected["bayes"])

    def test_bins(self, bayes_parameters, reference_vector):
        scorer = BayesScorer(bayes_parameters)
        bins = scorer.describe_bins(np.array(reference_vector))
        assert bins == {"RETP": 0, "HGB": 1, "HCT": 1, "RBC": 1, "MCV": 1, "MCH": 1, "MCHC": 1}

    def test_log_ratio_of_products(self, bayes_parameters, reference_sample):
        """RETP bin 0 (0.2/0.5) and HGB bin 2 (0.5/0.2) cancel out."""
        scorer = BayesScorer(bayes_parameters)
        batch = MarkerBatch.coerce({**reference_sample, "HGB": 18.0})
        assert scorer.score(batch)[0] == pytest.approx(0.0, abs=1e-12)

    def test_missing_marker_is_undefined(self, bayes_parameters, reference_sample):
        scorer = BayesScorer(bayes_parameters)
        batch = MarkerBatch.coerce({**reference_sample, "MCHC": None})
        assert math.isnan(scorer.score(batch)[0])

    def test_below_first_threshold_is_undefined(self, bayes_tables, reference_sample):
        bayes_tables["thresholds"]["RETP"] = [0.3, 0.5, 1.5]
        params = BayesParameters.from_tables(score_std=2.0, **bayes_tables)
        batch = MarkerBatch.coerce({**reference_sample, "RETP": 0.2})
        assert math.isnan(BayesScorer(params).score(batch)[0])

    def test_extreme_score_warns_once(self, bayes_tables, reference_vector):
        positive = {m: [1e-20] * 3 for m in MARKERS}
        negative = {m: [1.0] * 3 for m in MARKERS}
        params = BayesParameters.from_tables(
            bayes_tables["bounds"], bayes_tables["thresholds"], positive, negative, 1.0
        )
        batch = MarkerBatch.coerce([reference_vector, reference_vector])

        with pytest.warns(NumericalPrecisionWarning) as record:
            scores = BayesScorer(params).score(batch)

        assert len([w for w in record if issubclass(w.category, NumericalPrecisionWarning)]) == 1
        assert scores[0] == pytest.approx(7 * math.log(1e-20))

    def test_extreme_positive_score_warns(self, bayes_tables, reference_vector):
        positive = {m: [1.0] * 3 for m in MARKERS}
        negative = {m: [1e-20] * 3 for m in MARKERS}
        params = BayesParameters.from_tables(
            bayes_tables["bounds"], bayes_tables["thresholds"], positive, negative, 1.0
        )
        with pytest.warns(NumericalPrecisionWarning):
            BayesScorer(params).score(MarkerBatch.coerce(reference_vector))

    def test_ordinary_score_does_not_warn(self, bayes_parameters, reference_vector):
        with warnings.catch_warnings():
            warnings.simplefilter("error", NumericalPrecisionWarning)
            BayesScorer(bayes_parameters).score(MarkerBatch.coerce(reference_vector))


class TestSVMScorer:
    """Tests for SVMScorer."""

    def test_rbf_kernel(self):
        svs = np.array([[0.0, 0.0], [1.0, 2.0]])
        k = rbf_kernel(np.array([0.0, 0.0]), svs, gamma=0.5)
        np.testing.assert_allclose(k, [1.0, math.exp(-2.5)])

    def test_reference_sample(self, svm_parameters, reference_vector, expected):
        scorer = SVMScorer(svm_parameters)
        assert scorer.score(MarkerBatch.coerce(reference_vector))[0] == pytest.approx(expected["svm"])

    def test_standardize(self, svm_parameters, reference_sample):
        scorer = SVMScorer(svm_parameters)
        sample = MarkerBatch.coerce({**reference_sample, "HGB": 15.6}).values[0]
        z = scorer.standardize(sample)
        np.testing.assert_allclose(z, [0.0, 1.0, 0.0, 0.0, 0.0, 0.0, 0.0], atol=1e-12)

    def test_shifted_sample(self, svm_parameters, reference_sample):
        """z = e_HGB: distance 1 to the origin, 6 to the all-ones vector."""
        scorer = SVMScorer(svm_parameters)
        batch = MarkerBatch.coerce({**reference_sample, "HGB": 15.6})
        expected = 2.0 * math.exp(-0.5) - math.exp(-3.0) - 0.5
        assert scorer.score(batch)[0] == pytest.approx(expected)

    def test_missing_marker_is_undefined(self, svm_parameters, reference_sample):
        batch = MarkerBatch.coerce({**reference_sample, "RBC": None})
        assert math.isnan(SVMScorer(svm_parameters).score(batch)[0])


class TestCombine:
    """Tests for the fixed-weight ensemble."""

    def test_formula(self):
        result = combine(np.array([1.5]), np.array([-0.4]), bayes_std=3.0, svm_std=0.8)
        assert result[0] == pytest.approx((6 * 1.5 / 3.0 - 0.4 / 0.8) / 4.75)

    def test_undefined_component(self):
        result = combine(np.array([np.nan, 1.0]), np.array([1.0, np.nan]), 1.0, 1.0)
        assert np.isnan(result).all()


class TestProfileInterpretation:
    """Interpretation bands of the ABPS."""

    def test_bands(self):
        assert ProfileInterpretation.from_score(-0.54) == ProfileInterpretation.NO_INDICATION
        assert ProfileInterpretation.from_score(0.0) == ProfileInterpretation.NO_INDICATION
        assert ProfileInterpretation.from_score(0.3) == ProfileInterpretation.SUSPICIOUS
        assert ProfileInterpretation.from_score(1.0) == ProfileInterpretation.LIKELY_DOPING
        assert ProfileInterpretation.from_score(2.7) == ProfileInterpretation.LIKELY_DOPING
        assert ProfileInterpretation.from_score(float("nan")) == ProfileInterpretation.UNDEFINED


class TestABPSScorer:
    """Tests for the ABPS facade."""

    def test_named_fields(self, scorer, reference_sample, expected):
        score = abps(scorer=scorer, **reference_sample)
        assert isinstance(score, float)
        assert score == pytest.approx(expected["abps"])

    def test_same_result_for_every_input_shape(self, scorer, reference_sample, reference_vector):
        named = scorer.score(**reference_sample)
        assert scorer.score(reference_sample) == pytest.approx(named)
        assert scorer.score(reference_vector) == pytest.approx(named)
        single_row = scorer.score(pd.DataFrame([reference_sample]))
        assert single_row.shape == (1,)
        assert single_row[0] == pytest.approx(named)

    def test_two_identical_rows(self, scorer, reference_vector, expected):
        scores = scorer.score(np.array([reference_vector, reference_vector]))
        assert scores.shape == (2,)
        assert scores[0] == scores[1]
        assert scores[0] == pytest.approx(expected["abps"])

    def test_missing_row_does_not_affect_others(self, scorer, reference_sample, expected):
        frame = pd.DataFrame([
            reference_sample,
            {**reference_sample, "HCT": None},
            reference_sample,
        ])
        scores = scorer.score(frame)
        assert math.isnan(scores[1])
        assert scores[0] == pytest.approx(expected["abps"])
        assert scores[2] == pytest.approx(expected["abps"])

    def test_row_order_preserved(self, scorer, reference_sample):
        rows = [
            reference_sample,
            {**reference_sample, "HGB": 17.5, "RETP": 0.2},
            {**reference_sample, "MCV": 80.0},
        ]
        forward = scorer.score(rows)
        backward = scorer.score(rows[::-1])
        np.testing.assert_allclose(backward, forward[::-1])
        assert len(set(np.round(forward, 12))) == 3

    def test_idempotent(self, scorer, reference_sample):
        assert scorer.score(reference_sample) == scorer.score(reference_sample)

    def test_clipping_saturates(self, scorer, reference_sample):
        """Beyond the bounds the score no longer changes."""
        at_bound = scorer.score({**reference_sample, "HGB": 20.0})
        beyond = scorer.score({**reference_sample, "HGB": 1000.0})
        assert beyond == at_bound

    def test_structural_failure(self, scorer, reference_sample):
        del reference_sample["MCH"]
        with pytest.raises(MissingVariablesError):
            scorer.score(reference_sample)
        with pytest.raises(MissingVariablesError):
            abps(scorer=scorer, **reference_sample)

    def test_no_input(self, scorer):
        with pytest.raises(MissingVariablesError):
            scorer.score()

    def test_keyword_batch(self, scorer, reference_sample, expected):
        markers = {m: [v, v] for m, v in reference_sample.items()}
        scores = abps(scorer=scorer, **markers)
        np.testing.assert_allclose(scores, [expected["abps"]] * 2)

    def test_detailed(self, scorer, reference_sample, expected):
        results = scorer.score_detailed([reference_sample, {**reference_sample, "RETP": 9.0}])
        first, second = results
        assert first.bayes_score == pytest.approx(expected["bayes"])
        assert first.svm_score == pytest.approx(expected["svm"])
        assert first.abps == pytest.approx(expected["abps"])
        assert first.interpretation == ProfileInterpretation.SUSPICIOUS
        assert first.clipped_markers == []
        assert second.clipped_markers == ["RETP"]
        assert second.bins["RETP"] == 2

    def test_detailed_undefined_serializes_as_none(self, scorer, reference_sample):
        result = scorer.score_detailed({**reference_sample, "RETP": None})[0]
        assert not result.is_defined
        d = result.to_dict()
        assert d["abps"] is None
        assert d["bayes_score"] is None
        assert d["interpretation"] == "undefined"
        assert d["bins"]["RETP"] is None

    def test_from_file(self, tmp_path, artifact_document, reference_sample, expected):
        import json
        path = tmp_path / "abps.json"
        path.write_text(json.dumps(artifact_document), encoding="utf-8")
        scorer = ABPSScorer.from_file(path)
        assert scorer.version == "test-1"
        assert scorer.score(reference_sample) == pytest.approx(expected["abps"])


class TestPrecisionWarningLocation:
    """The precision warning is attributed to the line that asked for the score."""

    @pytest.fixture
    def extreme_scorer(self, bayes_tables, svm_parameters):
        positive = {m: [1e-20] * 3 for m in MARKERS}
        negative = {m: [1.0] * 3 for m in MARKERS}
        params = BayesParameters.from_tables(
            bayes_tables["bounds"], bayes_tables["thresholds"], positive, negative, 1.0
        )
        return ABPSScorer(params, svm_parameters)

    def _caught(self, call):
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always", NumericalPrecisionWarning)
            call()
        return [w for w in caught if issubclass(w.category, NumericalPrecisionWarning)]

    def test_score(self, extreme_scorer, reference_sample):
        caught = self._caught(lambda: extreme_scorer.score(reference_sample))
        assert len(caught) == 1
        assert caught[0].filename == __file__

    def test_abps_function(self, extreme_scorer, reference_sample):
        caught = self._caught(lambda: abps(scorer=extreme_scorer, **reference_sample))
        assert len(caught) == 1
        assert caught[0].filename == __file__

    def test_score_detailed(self, extreme_scorer, reference_vector):
        caught = self._caught(lambda: extreme_scorer.score_detailed([reference_vector] * 2))
        assert len(caught) == 1
        assert caught[0].filename == __file__
