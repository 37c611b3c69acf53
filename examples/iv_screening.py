#!/usr/bin/env python3
"""
Demonstration of WOE encoding and IV screening with woekit

This example fits WOE tables for a few categorical features, prints their
Information Value, scores new data containing an unseen category and saves the
fitted model to disk.
"""

import tempfile
from pathlib import Path

import numpy as np
import pandas as pd

from woekit import WoeEncoder, WoeModel
from woekit.display import print_iv_summary, print_woe_table
from woekit.logging_config import setup_logger

setup_logger(level="INFO")

# Set random seed for reproducibility
np.random.seed(42)
n_samples = 2000

print("woekit IV Screening Demo")
print("=" * 50)

df = pd.DataFrame(
    {
        "grade": np.random.choice(["A", "B", "C", "D"], n_samples, p=[0.4, 0.3, 0.2, 0.1]),
        "purpose": np.random.choice(["car", "home", "education", None], n_samples),
        "noise_feature": np.random.choice(["X", "Y", "Z", "W"], n_samples),
    }
)

# Default rate driven by grade
default_rate = df["grade"].map({"A": 0.05, "B": 0.1, "C": 0.2, "D": 0.35})
df["default"] = (np.random.rand(n_samples) < default_rate).astype(int)

print(f"Dataset: {n_samples} samples, {len(df.columns) - 1} features")
print(f"Target distribution: {df['default'].value_counts().to_dict()}")

encoder = WoeEncoder(
    input_cols=["grade", "purpose", "noise_feature"],
    label_col="default",
    output_col_postfix="woe",
    n_jobs=-1,
)
model = encoder.fit(df)

print_iv_summary(model)
print_woe_table(model, "grade")

# "E" was never seen during fit and scores as NaN
new_data = pd.DataFrame({"grade": ["A", "D", "E"], "purpose": ["car", None, "home"], "noise_feature": ["X", "Y", "Z"]})
print(model.transform(new_data))

with tempfile.TemporaryDirectory() as tmp:
    path = Path(tmp) / "woe_model"
    model.save(path)
    restored = WoeModel.load(path)
    print(f"\nRestored {restored}")
    print(restored.get_iv_analysis())
