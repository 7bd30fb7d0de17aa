"""
Telco Churn Report
==================

Batch churn analysis for telecom customer records: clean, encode, split,
scale, fit a logistic-regression or LightGBM classifier, and report.

Modules:
    - data: Loading, cleaning, splitting/scaling and class rebalancing
    - features: Categorical encoding
    - models: Classifiers and evaluation
    - pipelines: End-to-end training run
    - reporting: Printed report and charts
    - utils: Utility functions
"""

__version__ = "1.0.0"
