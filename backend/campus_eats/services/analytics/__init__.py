"""
Kitchen analytics package.

Time bucketing, period comparison, customer cohorts and the report
aggregator, plus the repository and service that feed them.
"""
