SYSTEM_PROMPT = (
    "You are a helpful assistant that generates clear and concise pull request messages. "
    "Use markdown."
)

_USER_PROMPT_TEMPLATE = (
    "Generate a pull request message for the following changes between main and "
    "feature branches:\n\n{diff}"
)


def build_user_prompt(diff_text: str) -> str:
    return _USER_PROMPT_TEMPLATE.format(diff=diff_text)
