"""Aggregation, comparison, forecasting and anomaly detection."""
