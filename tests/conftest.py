"""Shared fixtures: synthetic Telco customer tables and a test configuration."""

import copy

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

from config import load_config


def _service(rng, internet, n_rows):
    values = rng.choice(["Yes", "No"], n_rows)
    return np.where(internet == "No", "No internet service", values)


def make_telco_frame(n_rows: int = 200, seed: int = 0) -> pd.DataFrame:
    """Telco-shaped customer table with a churn signal in contract, tenure and fiber."""
    rng = np.random.default_rng(seed)

    tenure = rng.integers(0, 73, n_rows)
    tenure[0] = 0
    contract = rng.choice(["Month-to-month", "One year", "Two year"], n_rows, p=[0.55, 0.25, 0.2])
    internet = rng.choice(["DSL", "Fiber optic", "No"], n_rows, p=[0.35, 0.45, 0.2])
    phone = rng.choice(["Yes", "No"], n_rows, p=[0.9, 0.1])
    monthly = np.round(
        np.where(internet == "No", rng.uniform(18, 30, n_rows), rng.uniform(40, 115, n_rows)), 2
    )

    logit = (
        -1.2
        + 1.6 * (contract == "Month-to-month")
        - 0.04 * tenure
        + 0.9 * (internet == "Fiber optic")
    )
    churn = rng.random(n_rows) < 1.0 / (1.0 + np.exp(-logit))

    return pd.DataFrame({
        "customerID": [f"{i:04d}-CUST" for i in range(n_rows)],
        "gender": rng.choice(["Female", "Male"], n_rows),
        "SeniorCitizen": rng.choice([0, 1], n_rows, p=[0.85, 0.15]),
        "Partner": rng.choice(["Yes", "No"], n_rows),
        "Dependents": rng.choice(["Yes", "No"], n_rows, p=[0.3, 0.7]),
        "tenure": tenure,
        "PhoneService": phone,
        "MultipleLines": np.where(
            phone == "No", "No phone service", rng.choice(["Yes", "No"], n_rows)
        ),
        "InternetService": internet,
        "OnlineSecurity": _service(rng, internet, n_rows),
        "OnlineBackup": _service(rng, internet, n_rows),
        "DeviceProtection": _service(rng, internet, n_rows),
        "TechSupport": _service(rng, internet, n_rows),
        "StreamingTV": _service(rng, internet, n_rows),
        "StreamingMovies": _service(rng, internet, n_rows),
        "Contract": contract,
        "PaperlessBilling": rng.choice(["Yes", "No"], n_rows),
        "PaymentMethod": rng.choice(
            ["Electronic check", "Mailed check", "Bank transfer (automatic)", "Credit card (automatic)"],
            n_rows,
        ),
        "MonthlyCharges": monthly,
        # Customers in their first month have a blank TotalCharges, as in the public dataset
        "TotalCharges": [" " if t == 0 else f"{m * t:.2f}" for m, t in zip(monthly, tenure)],
        "Churn": np.where(churn, "Yes", "No"),
    })


@pytest.fixture
def telco_frame_factory():
    return make_telco_frame


@pytest.fixture
def telco_df():
    return make_telco_frame(300, seed=1)


@pytest.fixture
def tiny_df():
    """10 customers, 3 churned, exactly one malformed TotalCharges cell."""
    df = make_telco_frame(10, seed=7)
    df["tenure"] = df["tenure"] + 1
    df["TotalCharges"] = (df["MonthlyCharges"] * df["tenure"]).round(2).astype(str)
    df.loc[4, "TotalCharges"] = " "
    df["Churn"] = ["Yes", "No", "No", "Yes", "No", "No", "No", "Yes", "No", "No"]
    return df


@pytest.fixture
def config():
    """Project configuration with small LightGBM settings and no file logging."""
    cfg = copy.deepcopy(load_config())
    cfg["models"]["lightgbm"]["params"] = {
        "num_leaves": 7,
        "learning_rate": 0.1,
        "feature_fraction": 0.9,
        "num_rounds": 60,
        "early_stopping_rounds": 10,
        "min_child_samples": 5,
    }
    cfg["logging"]["log_file"] = None
    return cfg
