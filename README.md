# beefilter

Building blocks for task-list filters: a tokenizer for filter expressions
such as

    some status:completed or (+work and -urgent) due.before:tomorrow

and a set of filter classes that combine into a tree and are checked against
tasks.

## Installation

    pip install beefilter

## Tokenizing an expression

`beefilter.lexer.Lexer` splits text into `Token`s. It works on grapheme
clusters, so a letter with combining accents counts as one character.

```python
from beefilter.lexer import Lexer, TokenType

for token in Lexer("status:pending +work"):
    print(token.token_type, repr(token.literal))
# FilterStatus 'status:'
# WordString 'pending'
# Blank ' '
# TagPlusPrefix '+'
# WordString 'work'
```

Iterating a `Lexer` yields tokens up to, but not including, the end of input.
`Lexer.next_token()` reads one token at a time and returns a token of type
`TokenType.EOF` with an empty literal once the input is used up.

Each `Token` has a `token_type` (a `TokenType`) and the exact `literal` it was
read from. The lexer recognises:

- runs of whitespace (`BLANK`);
- UUIDs (`UUID`) and runs of ASCII digits (`INT`);
- `+` and `-` (`TAG_PLUS_PREFIX`, `TAG_MINUS_PREFIX`), `(` and `)`;
- `and`, `or` and `xor` as operators, unless more word characters follow
  them (`ands` is a word);
- the prefixes `status:`, `project:`, `proj:`, `depends:`, `due:`,
  `due.before:`, `due.after:`, `created.before:`, `created.after:`,
  `end.before:` and `end.after:`;
- words of letters (`WORD_STRING`) and any other text (`STRING`), which end at
  whitespace, parentheses, `+` or `-`.

## Filters

`beefilter.filters` holds the filter classes. Each has
`validate_task(task)`, which returns whether a task matches.

- `AndFilter`, `OrFilter`, `XorFilter` hold a list of `children`; `XorFilter`
  matches when exactly one child matches. `add_child()` appends a child.
- `RootFilter` matches everything; `new_empty()` returns one. Root children
  of a composite filter are ignored.
- `StringFilter(value)` — the summary contains the value, ignoring case.
- `TagFilter(include, tag_name)` — the task has, or lacks, the tag.
- `StatusFilter(status)`, `ProjectFilter(name)` (the project name starts with
  `name`, so sub-projects such as `hey.a.b` match `hey`),
  `TaskIdFilter(id)`, `UuidFilter(uuid)`.
- `DateCreatedFilter(time, before)`, `DateEndFilter(time, before)` —
  before the time, or at and after it. `DateEndFilter` never matches a task
  without a completion date.
- `DateDueFilter(time, type_when)` with a `DateDueFilterType` of `DAY`
  (due on the same local day), `BEFORE` or `AFTER`.
- `DependsOnFilter(id=None, uuid=None)` — the task depends on the given task.
  `convert_id_to_uuid(mapping)` fills in the UUID from an id; checking a task
  without a UUID raises `ValueError`.

Filters accept any task object with these attributes: `summary`, `status`,
`tags`, `project`, `date_created`, `date_due`, `date_completed`, `id`, `uuid`
and `depends`.

```python
from types import SimpleNamespace
from beefilter.filters import AndFilter, StringFilter, TagFilter

task = SimpleNamespace(summary="Write report", tags={"work"})
flt = AndFilter([StringFilter("report"), TagFilter(include=True, tag_name="work")])
flt.validate_task(task)  # True
```

Iterating a filter yields it and every filter below it, depth first.
`str(filter)` gives an indented, readable outline of the tree.

`Filter.to_dict()` returns plain, JSON-compatible data, for example
`{"type": "StringFilter", "value": {"value": "report"}}`, and
`filter_from_dict()` rebuilds the filter; bad data raises `ValueError`.

## What this package does not do

It does not turn a whole expression into a filter tree, and it does not read
date expressions such as `today - 9days`. The lexer gives you the tokens; the
filters must be built in your own code. There is no command-line tool and no
task storage.