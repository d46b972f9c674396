"""
API Services Layer.

Database operations and orchestration behind the API endpoints.
"""

from api.services.interviews import (
    get_interview,
    start_interview,
    submit_introduction,
    submit_answer,
    complete_interview,
)

from api.services.consistency import (
    calculate_consistency_metrics,
    record_evaluation,
    get_calibration_baseline,
    set_human_score,
)

from api.services.questions import (
    list_questions,
    random_question,
    seed_questions,
)

from api.services.hr import (
    list_candidates,
    get_interview_detail,
    record_recommendation,
    get_hr_metrics,
)

from api.services.analytics import (
    get_system_metrics,
    get_evaluation_history,
)

from api.services.users import (
    register_user,
    authenticate_user,
    create_session,
    resolve_token,
    revoke_session,
    init_demo_accounts,
)

__all__ = [
    # Interviews
    "get_interview",
    "start_interview",
    "submit_introduction",
    "submit_answer",
    "complete_interview",
    # Consistency
    "calculate_consistency_metrics",
    "record_evaluation",
    "get_calibration_baseline",
    "set_human_score",
    # Questions
    "list_questions",
    "random_question",
    "seed_questions",
    # HR
    "list_candidates",
    "get_interview_detail",
    "record_recommendation",
    "get_hr_metrics",
    # Analytics
    "get_system_metrics",
    "get_evaluation_history",
    # Users
    "register_user",
    "authenticate_user",
    "create_session",
    "resolve_token",
    "revoke_session",
    "init_demo_accounts",
]
