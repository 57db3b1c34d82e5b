"""HTML documents served by the handler."""

PAGE_TEMPLATE = """
<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<title>{title}</title>
</head>
<body>
\t<h1>{title}</h1>
\t<p>{description}</p>
</body>
</html>
"""

FORM_PAGE = """
<!DOCTYPE html>
<html lang="en">
<head><meta charset="UTF-8"><title>Submit Form</title></head>
<body>
\t<h1>Submit Form</h1>
\t<form action="/submit" method="POST">
\t\t<label>Name: <input type="text" name="name" /></label><br>
\t\t<label>Email: <input type="email" name="email" /></label><br>
\t\t<button type="submit">Submit</button>
\t</form>
</body>
</html>
"""

SUBMITTED_TEMPLATE = """
<!DOCTYPE html>
<html lang="en">
<head><meta charset="UTF-8"><title>Form Submitted</title></head>
<body>
\t<h1>Form Submitted</h1>
\t<p>Name: {name}</p>
\t<p>Email: {email}</p>
</body>
</html>
"""

BAD_REQUEST_BODY = "<h1>400 Bad Request</h1><p>Invalid form data</p>"
MALFORMED_REQUEST_BODY = "<h1>400 Bad Request</h1>"
METHOD_NOT_ALLOWED_BODY = "<h1>405 Method Not Allowed</h1>"
PAYLOAD_TOO_LARGE_BODY = "<h1>413 Payload Too Large</h1>"
SERVER_ERROR_BODY = "<h1>Error 500</h1><p>Internal Server Error</p>"


def create_page(title: str, description: str) -> str:
    """Render the page shell.

    Nothing is escaped here: callers must pass trusted or sanitized text.
    """
    return PAGE_TEMPLATE.format(title=title, description=description)


def submitted_page(name: str, email: str) -> str:
    return SUBMITTED_TEMPLATE.format(name=name, email=email)


def sanitize(value: str) -> str:
    """Escape `<` and `>` so user input cannot open tags."""
    return value.replace("<", "&lt;").replace(">", "&gt;")
