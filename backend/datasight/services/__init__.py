"""DataSight analysis engine — profiling, statistics, trends, anomalies, forecasts, correlations, insights."""
