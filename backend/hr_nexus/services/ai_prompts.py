def interview_email_system_prompt() -> str:
    return (
        "You are an HR coordinator writing to job candidates. Return only the email text. "
        "No markdown fences, no commentary before or after the email."
    )


def interview_email_user_prompt(*, candidate_name: str, role_title: str, company_name: str) -> str:
    return (
        f'Compose a professional and warm interview invitation email for a candidate named "{candidate_name}" '
        f'for the position of "{role_title}" at "{company_name}".\n'
        "Include placeholders for Date, Time, and Interviewer Name.\n"
        "The tone should be professional yet welcoming, suitable for a modern tech startup."
    )
