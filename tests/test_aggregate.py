import numpy as np
import pandas as pd
import pytest

from pysirs.aggregate import COMPONENT_COLUMNS, arterial_pco2_min, score_components
from pysirs.assertions import SirsAssertionError


def test_venous_reading_never_lowers_arterial_min():
    bg = pd.DataFrame({
        'icustay_id': [1, 1],
        'specimen_pred': ['VEN', 'ART'],
        'pco2': [20.0, 35.0],
    })
    result = arterial_pco2_min(bg)
    assert result['paco2_min'].tolist() == [35.0]


def test_stay_without_arterial_sample_has_no_row(bloodgas):
    bg = pd.concat([bloodgas, pd.DataFrame({
        'icustay_id': [500], 'specimen_pred': ['MIX'], 'pco2': [10.0],
    })], ignore_index=True)
    result = arterial_pco2_min(bg).set_index('icustay_id')['paco2_min']
    assert result.to_dict() == {100: 35.0, 200: 25.0, 300: 30.0}


def test_custom_arterial_label():
    bg = pd.DataFrame({
        'icustay_id': [1, 1],
        'specimen_pred': ['arterial', 'ART'],
        'pco2': [33.0, 20.0],
    })
    assert arterial_pco2_min(bg, arterial_label='arterial')['paco2_min'].tolist() == [33.0]


def test_left_join_keeps_every_cohort_stay(bloodgas, vitals, labs):
    cohort = pd.DataFrame({'icustay_id': [100, 300, 400]})
    data = score_components(cohort, bloodgas, vitals, labs)

    assert list(data.columns) == ['icustay_id'] + COMPONENT_COLUMNS
    assert data['icustay_id'].tolist() == [100, 300, 400]
    assert data.loc[0, 'paco2_min'] == 35.0
    assert data.loc[1, 'paco2_min'] == 30.0
    assert data.loc[2, COMPONENT_COLUMNS].isna().all()


def test_empty_aggregate_tables():
    cohort = pd.DataFrame({'icustay_id': [1, 2]})
    empty_bg = pd.DataFrame({'icustay_id': pd.Series([], dtype='int64'),
                             'specimen_pred': pd.Series([], dtype='object'),
                             'pco2': pd.Series([], dtype='float64')})
    empty_vitals = pd.DataFrame({c: pd.Series([], dtype='float64') for c in
                                 ['tempc_min', 'tempc_max', 'heartrate_max', 'resprate_max']})
    empty_vitals.insert(0, 'icustay_id', pd.Series([], dtype='int64'))
    empty_labs = pd.DataFrame({c: pd.Series([], dtype='float64') for c in
                               ['wbc_min', 'wbc_max', 'bands_max']})
    empty_labs.insert(0, 'icustay_id', pd.Series([], dtype='int64'))

    data = score_components(cohort, empty_bg, empty_vitals, empty_labs)
    assert len(data) == 2
    assert data[COMPONENT_COLUMNS].isna().all().all()
    assert (data[COMPONENT_COLUMNS].dtypes == np.float64).all()


def test_duplicate_vitals_rows_are_rejected(bloodgas, vitals, labs):
    doubled = pd.concat([vitals, vitals.iloc[[0]]], ignore_index=True)
    cohort = pd.DataFrame({'icustay_id': [100]})
    with pytest.raises(SirsAssertionError, match="vitals"):
        score_components(cohort, bloodgas, doubled, labs)


def test_duplicate_labs_rows_are_rejected(bloodgas, vitals, labs):
    doubled = pd.concat([labs, labs.iloc[[1]]], ignore_index=True)
    cohort = pd.DataFrame({'icustay_id': [200]})
    with pytest.raises(SirsAssertionError, match="labs"):
        score_components(cohort, bloodgas, vitals, doubled)


def test_duplicate_rows_outside_cohort_are_ignored(bloodgas, vitals, labs):
    doubled = pd.concat([vitals, vitals.iloc[[1]]], ignore_index=True)
    cohort = pd.DataFrame({'icustay_id': [100, 300]})
    data = score_components(cohort, bloodgas, doubled, labs)
    assert data['icustay_id'].tolist() == [100, 300]
    assert data['heartrate_max'].tolist() == [95.0, 80.0]
