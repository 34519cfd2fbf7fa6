FORBIDDEN_CHARS = ["}", "{", "%", ">", "<", "^", ";", ":", "`", "$", '"', "@", "=", "?", "|", "*"]


def clean_string(string: str) -> str:
    string = string.replace("/", "_")
    for char in FORBIDDEN_CHARS:
        string = string.replace(char, "")
    return string
