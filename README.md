# qlab

Building blocks for exercising a linked-list string queue under careful
checking: tracked allocation that catches leaks and bad frees, guarded
execution under a time limit, levelled reporting, and a small command
interpreter. A self-balancing binary search tree comes along as a separate
exercise.

## Installation

```
pip install .
```

To run the test suite:

```
pip install .[test]
pytest
```

## Modules

### `qlab.report`

* `Reporter(verblevel=0, out=None)` writes messages to `out` (standard output
  by default) when their level is within `verblevel`.
  * `report(level, message)` writes the message and a newline;
    `report_noreturn(level, message)` writes it without the newline.
  * `report_event(kind, message)` reports a `MessageKind.WARN`, `ERROR` or
    `FATAL` event with its label. A fatal event raises `FatalError`.
  * `set_logfile(file_name)` copies all further output to a file;
    `close()` closes it. Reporting an event closes the log file.
* `Stopwatch` measures wall-clock time: `delta()` returns the seconds since
  the previous reading, `elapsed` the seconds since creation up to the last
  reading.

### `qlab.harness`

`Harness(reporter)` hands out `Block` objects and keeps track of them.

* `malloc(size)`, `calloc(nelem, elsize)` and `strdup(s)` allocate; they
  return `None` when a simulated failure occurs (`fail_probability`, in
  percent).
* `free(block)` reports blocks that are unknown (in `cautious_mode`) or whose
  guard markers were damaged.
* `allocation_check()` returns the number of blocks still allocated;
  `error_check()` returns whether an error occurred since the last check.
* With `noallocate_mode` set, any allocation or free is a fatal event.
* `guard(limit_time=False)` is a context manager for risky code: a call to
  `trigger_exception(message)` inside it, or running past `time_limit`
  seconds when `limit_time` is set (POSIX, main thread), abandons the body
  and reports the message as an error. Outside a guard,
  `trigger_exception` exits with status 1.

### `qlab.queue`

`Queue(harness=None)` is a queue of strings kept as a singly linked list, with
every element and string allocated through the harness.

```python
from qlab.harness import Harness
from qlab.queue import Queue
from qlab.report import Reporter

harness = Harness(Reporter(verblevel=1))
q = Queue(harness)
q.insert_head("dolphin")
q.insert_tail("gerbil")
q.insert_head("bear")
q.reverse()
print(list(q))        # ['gerbil', 'dolphin', 'bear']
q.sort()
print(q.remove_head())  # 'bear'
print(len(q))         # 2
q.free()
print(harness.allocation_check())  # 0
```

`insert_head` and `insert_tail` return `False` when an allocation fails.
`remove_head(bufsize=None)` returns `None` on an empty queue and, with a
`bufsize`, at most `bufsize - 1` characters. `reverse` and `sort` relink the
existing nodes; `merge_sort` and `merge` work on node chains directly.

### `qlab.console`

`Console(reporter=None)` reads command lines and runs them. Built-in commands:

```
help               | Show documentation
option [name val]  | Display or set options
quit               | Exit program
source file        | Read commands from source file
log file           | Copy output to file
time cmd arg ...   | Time command execution
# ...              | Display comment
```

Built-in integer options: `echo`, `error` (errors until command execution
stops, default 5), `simulation` and `verbose`. Options are read and set with
`console["name"]`; values given to `option` are parsed by `get_int`, which
accepts decimal, `0x` hexadecimal and leading-zero octal.

Add your own commands and options:

```python
from qlab.console import Console
from qlab.report import Reporter

console = Console(Reporter(verblevel=1))

def greet(argv):
    console.reporter.report(1, "hello " + " ".join(argv[1:]))
    return True

console.add_cmd("greet", greet, " [name]         | Say hello")
console.add_param("count", 3, "How many times", None)
console.interpret("greet world")    # prints "hello world"
console.interpret("option count 7")
print(console["count"])             # 7
print(console.completion("gr"))     # ['greet']
```

`run(infile_name)` runs commands from a file, or interactively from the
terminal when `infile_name` is `None` (with line editing and history in
`.cmd_history` where `readline` is available); it returns whether no errors
occurred. `add_quit_helper(helper)` registers functions to run on `quit`, and
`finish()` quits if needed and reports whether the session was error-free.

### `qlab.stree`

`STree` is a set of integers in a binary search tree that rebalances itself
using approximate height hints:

```python
from qlab.stree import STree

tree = STree()
for value in (5, 3, 8, 1, 4):
    tree.insert(value)

tree.remove(3)
print(list(tree))  # [1, 4, 5, 8]
```

`insert` returns the node for the value (the existing one if present),
`find` returns the node or `None`, and `remove` raises `KeyError` for a
missing value. `first(node)` and `last(node)` give the smallest and largest
node of a subtree.

The demo inserts and removes random values and prints the tree in order:

```
qlab-stree
```

## What is not included

* There is no ready-made queue-testing command: the console comes with its
  generic built-in commands only, and queue operations such as inserting,
  removing or showing elements have to be registered on it by the caller.
* There are no timing checks of whether queue operations run in constant
  time; the `simulation` option is stored but nothing acts on it.