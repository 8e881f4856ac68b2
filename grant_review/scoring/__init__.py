"""
scoring/ - Assessment Scoring & Results Aggregation Engine

Modules:
    utils.py              - Mean / population variance / weighted mean helpers
    score_validator.py    - Criterion Score Validator
    assessor_total.py     - Assessor Total Calculator
    result_aggregator.py  - Application Result Aggregator
    ranking.py            - Ranking Engine and leaderboard
    distributor.py        - Assignment Distributor
    progress_tracker.py   - Call Progress Tracker
"""
