#!/usr/bin/env python3
"""
fundamentals.py - CLI for the fundamentals sampler (single-file edition)

Features:
- parallel chunked sum over a read-only sequence (one thread per chunk)
- shared counter guarded by a single lock, poisoned if a holder fails
- small geometry, summary, parsing and branching helpers
- `run` command walking through every demonstration
- simple config persisted to config.json
"""

import json
import math
import os
import re
import sys
import threading
from abc import ABC, abstractmethod
import click

CONFIG_FILE = "config.json"
DEFAULT_CONFIG = {"worker_count": 4, "range_end": 100}

# The counter demo always spawns this many workers.
COUNTER_WORKERS = 5

I64_MIN = -(2 ** 63)
I64_MAX = 2 ** 63 - 1
_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


def load_config():
    if not os.path.exists(CONFIG_FILE):
        cfg = dict(DEFAULT_CONFIG)
        with open(CONFIG_FILE, "w") as f:
            json.dump(cfg, f, indent=2)
        return cfg
    with open(CONFIG_FILE, "r") as f:
        return json.load(f)


def save_config(cfg):
    with open(CONFIG_FILE, "w") as f:
        json.dump(cfg, f, indent=2)


# ---------------- Errors ----------------
class InvalidWorkerCount(ValueError):
    """Raised when a worker count below 1 is requested."""

    def __init__(self, count):
        super().__init__(f"worker count must be at least 1, got {count!r}")
        self.count = count


class WorkerFailed(RuntimeError):
    """Raised after the join barrier when one or more workers raised."""

    def __init__(self, name, errors):
        super().__init__(f"{len(errors)} {name} thread(s) failed: {errors[0]!r}")
        self.errors = errors


class PoisonedLockError(RuntimeError):
    """The counter's previous lock holder failed mid-update."""


class ParseError(ValueError):
    pass


class EmptyInput(ParseError):
    def __init__(self):
        super().__init__("input was empty")


class NotANumber(ParseError):
    def __init__(self, text):
        super().__init__(f"\"{text}\" is not a valid number")
        self.text = text


# ---------------- Worker Management ----------------
def fork_join(tasks, name="worker"):
    """Run each callable on its own thread and wait for all of them.

    Results come back in task order. If any task raised, WorkerFailed is
    raised once every thread has been joined, chained to the first error.
    """
    results = [None] * len(tasks)
    errors = []
    errors_lock = threading.Lock()

    def run(index, task):
        try:
            results[index] = task()
        except Exception as e:
            with errors_lock:
                errors.append(e)

    threads = []
    for i, task in enumerate(tasks):
        t = threading.Thread(target=run, args=(i, task), name=f"{name}-{i}", daemon=True)
        t.start()
        threads.append(t)

    for t in threads:
        t.join()

    if errors:
        raise WorkerFailed(name, errors) from errors[0]
    return results


def _check_worker_count(count):
    if isinstance(count, bool) or not isinstance(count, int) or count < 1:
        raise InvalidWorkerCount(count)


# ---------------- Chunked Sum ----------------
def chunk_bounds(length, worker_count):
    """Split [0, length) into worker_count contiguous half-open ranges.

    Every range has ceil(length / worker_count) items except the tail, which
    may be shorter or empty.
    """
    _check_worker_count(worker_count)
    chunk_size = -(-length // worker_count)
    bounds = []
    for i in range(worker_count):
        start = min(i * chunk_size, length)
        end = min(start + chunk_size, length)
        bounds.append((start, end))
    return bounds


def partial_sums(data, worker_count):
    """Sum each chunk of data on its own thread, in worker order."""
    _check_worker_count(worker_count)
    # frozen so every worker reads the same snapshot without locking
    shared = tuple(data)

    def summer(start, end):
        return lambda: sum(shared[start:end])

    tasks = [summer(start, end) for start, end in chunk_bounds(len(shared), worker_count)]
    return fork_join(tasks, name="sum-worker")


def chunked_sum(data, worker_count):
    return sum(partial_sums(data, worker_count))


# ---------------- Shared Counter ----------------
class SharedCounter:
    """An integer whose every read and write goes through one lock."""

    def __init__(self, value=0):
        self._value = value
        self._lock = threading.Lock()
        self._poisoned = False

    @property
    def poisoned(self):
        return self._poisoned

    def update(self, fn):
        """Replace the value with fn(value) while holding the lock.

        If fn raises, the counter is poisoned and the error propagates.
        """
        with self._lock:
            if self._poisoned:
                raise PoisonedLockError("counter lock poisoned by a failed holder")
            try:
                self._value = fn(self._value)
            except Exception:
                self._poisoned = True
                raise
            return self._value

    def increment(self):
        return self.update(lambda v: v + 1)

    def read(self):
        with self._lock:
            if self._poisoned:
                raise PoisonedLockError("counter lock poisoned by a failed holder")
            return self._value


def run_shared_counter(workers, step=None):
    """Have `workers` threads each apply `step` (default +1) once, then read."""
    _check_worker_count(workers)
    counter = SharedCounter()
    if step is None:
        task = counter.increment
    else:
        def task():
            return counter.update(step)
    fork_join([task] * workers, name="counter-worker")
    return counter.read()


def shared_increment_demo():
    return run_shared_counter(COUNTER_WORKERS)


# ---------------- Shapes ----------------
def _num(x):
    # shortest round-trip form: 10.0 -> "10", 0.1234567 -> "0.1234567"
    text = repr(float(x))
    return text[:-2] if text.endswith(".0") else text


class Rectangle:
    def __init__(self, width, height):
        self.width = width
        self.height = height

    def area(self):
        return self.width * self.height

    def is_square(self):
        return abs(self.width - self.height) < sys.float_info.epsilon

    def __repr__(self):
        return f"Rectangle(width={self.width!r}, height={self.height!r})"

    def __str__(self):
        return f"Rectangle({_num(self.width)}×{_num(self.height)})"


class Shape(ABC):
    @abstractmethod
    def area(self):
        ...

    @abstractmethod
    def describe(self):
        ...


class Circle(Shape):
    def __init__(self, radius):
        self.radius = radius

    def area(self):
        return math.pi * self.radius * self.radius

    def describe(self):
        return f"Circle with radius {self.radius:.2f}"


class Rect(Shape):
    def __init__(self, rect):
        self.rect = rect

    def area(self):
        return self.rect.area()

    def describe(self):
        return str(self.rect)


class Triangle(Shape):
    def __init__(self, base, height):
        self.base = base
        self.height = height

    def area(self):
        return 0.5 * self.base * self.height

    def describe(self):
        return f"Triangle with base {self.base:.2f} and height {self.height:.2f}"


# ---------------- Summaries ----------------
class Summary(ABC):
    @abstractmethod
    def summarize(self):
        ...

    def headline(self):
        return "(Read more...)"


class Article(Summary):
    def __init__(self, title, author, content):
        self.title = title
        self.author = author
        self.content = content

    def summarize(self):
        return f"{self.title} by {self.author} — {self.content[:50]}..."

    def headline(self):
        return f"Breaking: {self.title}"


class Tweet(Summary):
    def __init__(self, username, body):
        self.username = username
        self.body = body

    def summarize(self):
        return f"@{self.username}: {self.body}"


def print_summary(item):
    click.echo(f"  Headline : {item.headline()}")
    click.echo(f"  Summary  : {item.summarize()}")


def largest(a, b):
    return a if a >= b else b


# ---------------- Ownership / Lifetimes ----------------
def take_and_return(s):
    click.echo(f"  Took ownership of: {s}")
    return s


def first_word(s):
    """Text before the first space, or the whole string if there is none."""
    i = s.find(" ")
    return s if i == -1 else s[:i]


def push_value(values, value):
    values.append(value)


def longest(a, b):
    return a if len(a) >= len(b) else b


class Excerpt:
    def __init__(self, text):
        self.text = text

    def __repr__(self):
        return f"Excerpt(text={self.text!r})"

    def level(self):
        return 3

    def announce(self, announcement):
        click.echo(f"  Announcement: {announcement}")
        return self.text


# ---------------- Parsing / Branching ----------------
def parse_number(text):
    """Parse a signed 64-bit integer, ignoring surrounding whitespace."""
    trimmed = text.strip()
    if not trimmed:
        raise EmptyInput()
    if not _INTEGER_RE.fullmatch(trimmed):
        raise NotANumber(trimmed)
    value = int(trimmed)
    if not I64_MIN <= value <= I64_MAX:
        raise NotANumber(trimmed)
    return value


def find_even(numbers):
    for n in numbers:
        if n % 2 == 0:
            return n
    return None


def classify_number(n):
    if n < 0:
        return "negative"
    if n == 0:
        return "zero"
    if n <= 100:
        return "small positive"
    return "large positive"


def describe_option(value):
    if value is None:
        return "nothing"
    if value > 0:
        return f"positive value: {value}"
    if value == 0:
        return "zero"
    return f"negative value: {value}"


# ---------------- CLI ----------------
@click.group()
def cli():
    """fundamentals - language fundamentals sampler"""
    pass


def _fail(e):
    click.echo(f"Error: {e}", err=True)
    raise SystemExit(1)


def _config_int(cfg, key):
    value = cfg.get(key, DEFAULT_CONFIG[key])
    try:
        return int(value)
    except (TypeError, ValueError):
        _fail(f"config key {key} must be an integer, got {value!r} (see {CONFIG_FILE})")


@cli.command()
def run():
    """Run every demonstration in order."""
    cfg = load_config()
    click.echo("=== Fundamentals ===\n")

    click.echo("-- Variables and Types --")
    name, year, pi, active = "Python", 1991, 3.14159, True
    count = 0
    count += 1
    click.echo(f"  name={name}, year={year}, pi={pi:.2f}, active={str(active).lower()}, count={count}")
    x, y, z = (42, 6.28, "R")
    click.echo(f"  tuple: ({x}, {y:.2f}, '{z}')")
    click.echo(f"  array sum: {sum([1, 2, 3, 4, 5])}")

    click.echo("\n-- Ownership and Borrowing --")
    s2 = take_and_return("hello")
    click.echo(f"  Got it back: {s2}")
    click.echo(f"  First word: {first_word('hello world foo bar')}")
    numbers = [1, 2, 3]
    push_value(numbers, 4)
    click.echo(f"  After push: {numbers}")

    click.echo("\n-- Lifetimes --")
    click.echo(f"  Longest: {longest('long string', 'hi')}")
    excerpt = Excerpt(first_word("Call me Ishmael. Some years ago..."))
    click.echo(f"  Excerpt: {excerpt!r}, level={excerpt.level()}")
    excerpt.announce("Lifetime demo")

    click.echo("\n-- Structs and Enums --")
    rect = Rectangle(10.0, 5.0)
    click.echo(f"  {rect} — area={rect.area():.1f}, square={str(rect.is_square()).lower()}")
    for shape in [Circle(3.0), Rect(Rectangle(4.0, 6.0)), Triangle(8.0, 3.0)]:
        click.echo(f"  {shape.describe()} — area={shape.area():.2f}")

    click.echo("\n-- Pattern Matching --")
    for n in [-5, 0, 42, 200]:
        click.echo(f"  {n} → {classify_number(n)}")
    for opt in [10, 0, -3, None]:
        shown = "None" if opt is None else f"Some({opt})"
        click.echo(f"  {shown} → {describe_option(opt)}")

    click.echo("\n-- Error Handling --")
    for text in ["42", "", "abc", " -7 "]:
        try:
            click.echo(f"  parse(\"{text}\") = {parse_number(text)}")
        except ParseError as e:
            click.echo(f"  parse(\"{text}\") error: {e}")
    nums = [1, 3, 5, 8, 9]
    even = find_even(nums)
    if even is not None:
        click.echo(f"  First even in {nums}: {even}")
    else:
        click.echo(f"  No even number found in {nums}")
    even = find_even([1, 3, 5])
    click.echo(f"  Doubled first even (or 0): {even * 2 if even is not None else 0}")

    click.echo("\n-- Traits and Generics --")
    print_summary(Article(
        "Python 3.13 Release",
        "Python Team",
        "The new release brings several improvements to the language.",
    ))
    print_summary(Tweet("python", "Python 3.13 is out!"))
    click.echo(f"  largest(3, 7) = {largest(3, 7)}")
    click.echo(f"  largest('a', 'z') = {largest('a', 'z')}")

    click.echo("\n-- Concurrency --")
    workers = _config_int(cfg, "worker_count")
    end = _config_int(cfg, "range_end")
    try:
        total = chunked_sum(range(1, end + 1), workers)
        final_count = shared_increment_demo()
    except (InvalidWorkerCount, WorkerFailed) as e:
        _fail(e)
    click.echo(f"  Sum of 1..={end} using {workers} threads: {total}")
    click.echo(f"  Mutex counter after {COUNTER_WORKERS} threads: {final_count}")

    click.echo("\nDone.")


@cli.command("sum")
@click.option("--workers", default=None, type=int, help="Number of worker threads")
@click.option("--start", default=1, help="First value of the range")
@click.option("--end", default=None, type=int, help="Last value of the range (inclusive)")
@click.option("--verbose", is_flag=True, help="Show each worker's chunk and partial sum")
def sum_cmd(workers, start, end, verbose):
    """Sum start..=end across worker threads."""
    cfg = load_config()
    if workers is None:
        workers = _config_int(cfg, "worker_count")
    if end is None:
        end = _config_int(cfg, "range_end")
    data = list(range(start, end + 1))
    try:
        partials = partial_sums(data, workers)
        bounds = chunk_bounds(len(data), workers)
    except (InvalidWorkerCount, WorkerFailed) as e:
        _fail(e)
    if verbose:
        for i, ((lo, hi), partial) in enumerate(zip(bounds, partials)):
            click.echo(f"sum-worker-{i}: [{lo}, {hi}) -> {partial}")
    click.echo(f"Sum of {start}..={end} using {workers} threads: {sum(partials)}")


@cli.command()
@click.option("--iterations", default=1, help="How many times to run the demo")
def counter(iterations):
    """Run the shared counter demo, repeatedly if asked."""
    lost = 0
    for i in range(iterations):
        try:
            value = shared_increment_demo()
        except (WorkerFailed, PoisonedLockError) as e:
            _fail(e)
        if value != COUNTER_WORKERS:
            lost += 1
            click.echo(f"Run {i}: lost update, counter={value}", err=True)
    if lost:
        click.echo(f"{lost}/{iterations} run(s) lost updates.", err=True)
        raise SystemExit(1)
    click.echo(f"Mutex counter after {COUNTER_WORKERS} threads: {COUNTER_WORKERS} ({iterations} run(s))")


@cli.command()
@click.argument("inputs", nargs=-1)
def parse(inputs):
    """Parse each INPUT as a signed 64-bit integer."""
    failed = False
    for text in inputs:
        try:
            click.echo(f"parse(\"{text}\") = {parse_number(text)}")
        except ParseError as e:
            failed = True
            click.echo(f"parse(\"{text}\") error: {e}", err=True)
    if failed:
        raise SystemExit(1)


@cli.command()
@click.argument("numbers", nargs=-1, type=int)
def classify(numbers):
    """Classify each integer by sign and size."""
    for n in numbers:
        click.echo(f"{n} → {classify_number(n)}")


@cli.group()
def config():
    """Configuration management"""
    pass


@config.command("set")
@click.argument("key")
@click.argument("value")
def config_set(key, value):
    cfg = load_config()
    if key in cfg:
        try:
            v = int(value)
        except ValueError:
            if isinstance(DEFAULT_CONFIG.get(key), int):
                _fail(f"{key} must be an integer, got {value!r}")
            v = value
        cfg[key] = v
        save_config(cfg)
        click.echo(f"Updated {key} = {v}")
    else:
        click.echo(f"Unknown config key: {key}. Known keys: {list(cfg.keys())}")


@config.command("show")
def config_show():
    click.echo(json.dumps(load_config(), indent=2))


@cli.command("init")
def init_cmd():
    """Write the default config"""
    load_config()
    click.echo("Initialized default config.")


if __name__ == "__main__":
    cli()
