from typing import Callable, Iterable, Iterator, Union, cast

from mypy_extensions import KwArg, VarArg

# --
# HTMPL builds HTML documents as trees of nodes. Text and attribute values are
# escaped when the tree is serialized, except for `raw` nodes, which hold
# trusted markup like inline styles and scripts.

VOID_ELEMENTS: frozenset[str] = frozenset("meta link br hr img input".split())

ESCAPE_TEXT = str.maketrans(
	{"&": "&amp;", "<": "&lt;", ">": "&gt;", '"': "&quot;", "'": "&#x27;"}
)
ESCAPE_ATTRIBUTE = str.maketrans({"&": "&amp;", '"': "&quot;", "<": "&lt;"})

TChild = Union["Node", str, int, float, None]
TAttribute = str | int | float | bool | None


def escape(text: str) -> str:
	return text.translate(ESCAPE_TEXT)


class Node:
	"""An element with its attributes and children. Text children are
	kept as strings and escaped on output."""

	__slots__ = ["name", "attributes", "children"]

	def __init__(
		self,
		name: str,
		children: Iterable[TChild] = (),
		attributes: dict[str, TAttribute] | None = None,
	):
		self.name: str = name
		self.attributes: dict[str, TAttribute] = attributes or {}
		self.children: list[TChild] = list(children)

	def iterAttributes(self) -> Iterator[str]:
		for k, v in self.attributes.items():
			if v is True:
				yield f" {k}"
			elif v is not None and v is not False:
				yield f' {k}="{str(v).translate(ESCAPE_ATTRIBUTE)}"'

	def iterHTML(self) -> Iterator[str]:
		yield f"<{self.name}"
		yield from self.iterAttributes()
		yield ">"
		if self.name in VOID_ELEMENTS:
			return
		for child in self.children:
			if isinstance(child, Node):
				yield from child.iterHTML()
			elif child is not None:
				yield escape(str(child))
		yield f"</{self.name}>"

	def __str__(self) -> str:
		return "".join(self.iterHTML())


class Raw(Node):
	"""Markup that is output as-is."""

	__slots__: list[str] = []

	def __init__(self, html: str):
		super().__init__("#raw", (html,))

	def iterHTML(self) -> Iterator[str]:
		for child in self.children:
			yield str(child)


def raw(html: str) -> Node:
	return Raw(html)


NodeFactory = Callable[[VarArg(TChild | list[Node]), KwArg(TAttribute)], Node]


def element(name: str) -> NodeFactory:
	"""Returns a function creating `name` elements. Lists given as children
	are flattened, and the `_` keyword stands for the `class` attribute."""

	def create(*children: TChild | list[Node], **attributes: TAttribute) -> Node:
		flat: list[TChild] = []
		for child in children:
			if isinstance(child, (list, tuple)):
				flat.extend(child)
			else:
				flat.append(child)
		return Node(
			name,
			flat,
			{("class" if k == "_" else k): v for k, v in attributes.items()},
		)

	create.__name__ = name
	return cast(NodeFactory, create)


class Markup:
	"""Gives access to element factories as attributes, like `H.table`."""

	__slots__ = ["_elements"]

	def __init__(self, names: Iterable[str]):
		self._elements: dict[str, NodeFactory] = {_: element(_) for _ in names}

	def __getattr__(self, name: str) -> NodeFactory:
		try:
			return self._elements[name]
		except KeyError:
			raise AttributeError(f"Unsupported element: {name}") from None


H: Markup = Markup(
	"a body div h1 head html meta p script span style table tbody td th thead "
	"title tr".split()
)


def html(*nodes: Node, doctype: str | None = None) -> Iterator[str]:
	if doctype:
		yield f"<!DOCTYPE {doctype}>\n"
	for node in nodes:
		yield from node.iterHTML()


# EOF
