import numpy as np
import pandas as pd
import pytest

NA = np.nan


@pytest.fixture
def suspinfect():
    return pd.DataFrame({
        'icustay_id': [300, 100, 200, 400],
        'suspected_infection_time': [
            pd.Timestamp('2130-01-03 08:00'),
            pd.Timestamp('2130-01-01 12:00'),
            pd.NaT,
            pd.Timestamp('2130-01-04 02:30'),
        ],
    })


@pytest.fixture
def bloodgas():
    return pd.DataFrame({
        'icustay_id': [100, 100, 300, 300, 200],
        'specimen_pred': ['VEN', 'ART', 'ART', 'ART', 'ART'],
        'pco2': [20.0, 35.0, 30.0, 40.0, 25.0],
    })


@pytest.fixture
def vitals():
    return pd.DataFrame({
        'icustay_id': [100, 200, 300],
        'tempc_min': [37.0, 35.0, 36.5],
        'tempc_max': [37.0, 39.0, 38.0],
        'heartrate_max': [95.0, 120.0, 80.0],
        'resprate_max': [NA, 30.0, 18.0],
    })


@pytest.fixture
def labs():
    return pd.DataFrame({
        'icustay_id': [100, 200, 300],
        'wbc_min': [5.0, 2.0, 6.0],
        'wbc_max': [10.0, 15.0, 13.0],
        'bands_max': [NA, 20.0, NA],
    })


@pytest.fixture
def tables(suspinfect, bloodgas, vitals, labs):
    return {
        'suspinfect': suspinfect,
        'bloodgasarterial': bloodgas,
        'vitals': vitals,
        'labs': labs,
    }
