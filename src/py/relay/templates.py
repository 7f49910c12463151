from .utils.htmpl import H, Node, html, raw

BASE_CSS: str = """
body {
	font-family: system-ui, -apple-system, sans-serif;
	margin: 0;
	padding: 20px 40px;
	background: #f5f5f5;
	color: #333;
}
h1 {
	color: #333;
	border-bottom: 1px solid #ddd;
	padding-bottom: 10px;
}
@media (prefers-color-scheme: dark) {
	body {
		background: #1a1a1a;
		color: #e0e0e0;
	}
	h1 {
		color: #e0e0e0;
		border-bottom-color: #444;
	}
}
"""

LISTING_CSS: str = (
	BASE_CSS
	+ """
table {
	width: 100%;
	background: white;
	border-radius: 8px;
	box-shadow: 0 2px 12px rgba(0,0,0,0.06);
	border-collapse: collapse;
	margin-top: 20px;
	overflow: hidden;
}
th, td {
	text-align: left;
	padding: 12px 16px;
	border-bottom: 1px solid #eee;
}
th {
	background: #f8f8f8;
	font-weight: 600;
	color: #666;
}
tbody tr:last-child td {
	border-bottom: none;
}
tbody tr {
	cursor: pointer;
}
tbody tr:hover {
	background: #f9f9f9;
}
a {
	color: #0066cc;
	text-decoration: none;
}
a:hover {
	text-decoration: underline;
}
.icon {
	font-size: 1.2em;
	vertical-align: middle;
	margin-right: 4px;
}
.size, .modified {
	color: #666;
	font-size: 0.9em;
	text-align: right;
}
.size {
	width: 100px;
}
.modified {
	width: 200px;
}
@media (prefers-color-scheme: dark) {
	table {
		background: #2a2a2a;
		box-shadow: 0 2px 12px rgba(0,0,0,0.2);
	}
	th, td {
		border-bottom-color: #444;
	}
	th {
		background: #333;
		color: #aaa;
	}
	tbody tr:hover {
		background: #333;
	}
	a {
		color: #4db8ff;
	}
	.size, .modified {
		color: #999;
	}
}
"""
)

ERROR_CSS: str = (
	BASE_CSS
	+ """
p { color: #666; }
@media (prefers-color-scheme: dark) {
	p { color: #999; }
}
"""
)

# Clicking anywhere on a row follows its link
LISTING_JS: str = """
document.addEventListener('DOMContentLoaded', function() {
	document.querySelectorAll('tbody tr').forEach(function(row) {
		const link = row.querySelector('a');
		if (link) {
			row.addEventListener('click', function(e) {
				if (e.target.tagName !== 'A') {
					window.location.href = link.href;
				}
			});
		}
	});
});
"""


def page(title: str, css: str, *body: Node) -> str:
	return "".join(
		html(
			H.html(
				H.head(
					H.meta(charset="utf-8"),
					H.meta(
						name="viewport",
						content="width=device-width, initial-scale=1.0",
					),
					H.title(title),
					H.style(raw(css)),
				),
				H.body(*body),
			),
			doctype="html",
		)
	)


def listingPage(title: str, rows: list[Node]) -> str:
	return page(
		title,
		LISTING_CSS,
		H.h1(title),
		H.table(
			H.thead(
				H.tr(
					H.th("Name"),
					H.th("Size", _="size"),
					H.th("Modified", _="modified"),
				)
			),
			H.tbody(rows),
		),
		H.script(raw(LISTING_JS)),
	)


NOT_FOUND_HTML: str = page(
	"404 Not Found",
	ERROR_CSS,
	H.h1("404 Not Found"),
	H.p("The requested file was not found."),
)


# EOF
