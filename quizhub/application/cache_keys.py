from quizhub.domain.services import normalize_email

PUBLIC_STATS = "public_stats"


def otp(email: str) -> str:
    return f"otp:{normalize_email(email)}"


def student_stats(student_id: int | str) -> str:
    return f"student_stats:{student_id}"


def student_results(student_id: int | str) -> str:
    return f"student_results:{student_id}"


def counter(policy_name: str, subject: str) -> str:
    """`{policy}:{subject}`, e.g. otp_limit:a@x.com or msg_limit:42."""
    return f"{policy_name}:{subject}"
