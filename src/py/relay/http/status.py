from http import HTTPStatus

# Reason phrases for the status line, keyed by status code
HTTP_STATUS: dict[int, str] = {_.value: _.phrase for _ in HTTPStatus}

# EOF
