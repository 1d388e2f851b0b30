# palm

palm is a Python library for working with AI command-line tools. It
runs multi-step workflows across several tools, has a judge tool score
answers, checks code for leftovers that AI assistants tend to leave
behind, times shell commands, chains commands through pipes, keeps
per-tool context files in step, and backs up palm's state directory.

It needs Python 3.11 or later and has no third-party dependencies.

## Installing

```
pip install .
```

To run the test suite as well:

```
pip install ".[test]"
pytest
```

## Workflows (`palm.compose`)

A workflow is a TOML file, `.palm-compose.toml` by default. A relative
name is looked for in the working directory and then in each parent
directory in turn.

```toml
name = "code-review"
description = "Multi-tool code review pipeline"

[[steps]]
name = "analyze"
run = "cat src/main.py"

[[steps]]
name = "review"
tool = "ollama"
args = ["run", "llama3.3"]
input = "step:analyze"
depends_on = ["analyze"]

[[steps]]
name = "test"
run = "go test ./..."
depends_on = ["review"]
timeout = 60
```

Each step has either `run` (a command for `sh -c`) or `tool` plus
`args`. `input` takes a comma-separated list of sources that are joined
by blank lines and fed to the step's standard input:

- `step:<name>` — the output of an earlier step
- `file:<path>` — the contents of a file
- `git:diff` or `git:log` — output of `git diff` or `git log --oneline -10`
- anything else — the text itself

Sources that cannot be resolved are left out.

```python
from palm.compose import (
    load_compose_file,
    resolve_execution_order,
    format_dry_run,
    run_compose,
)

workflow = load_compose_file(".palm-compose.toml")
for level in resolve_execution_order(workflow):
    print([step.name for step in level])

print(format_dry_run(workflow))
results = run_compose(workflow, verbose=True)
```

- `load_compose_file(file)` raises `ComposeError` when the file is not
  found or is not valid TOML, for a step without a name, a step with
  neither `run` nor `tool`, duplicate step names, or a dependency on a
  step that does not exist.
- `resolve_execution_order(workflow)` groups steps into levels; every
  step's dependencies are in earlier levels, and steps caught in a
  dependency cycle are put together in one final level.
- `run_compose(workflow, env, verbose)` runs level by level, the steps
  of a level in parallel threads, and returns a `ComposeResult` per step
  run. It stops after a level in which a step failed, unless that step
  sets `on_fail = "continue"`.
- `execute_compose_step(step, env, stdin_data)` runs one step. On
  success the result's `output` is standard output, on failure standard
  error. A step whose `timeout` (seconds) runs out is killed and gets
  `error == "timeout"` and `exit_code == -1`.
- `compose_init(directory)` writes a sample `.palm-compose.toml` and
  raises `FileExistsError` if one is already there.

## Evaluating answers (`palm.evaluation`)

```python
from palm.evaluation import (
    build_eval_prompt,
    run_judge_tool,
    parse_eval_score,
    grade_from_score,
    render_scorecard,
)

prompt = build_eval_prompt("What is 2+2?", "", "The answer is 4")
reply = run_judge_tool("ollama", prompt, timeout=60)
score = parse_eval_score("ollama", reply)
print(score.overall, grade_from_score(score.overall))
print(render_scorecard([score]))
```

A judge replies with `ACCURACY`, `HALLUCINATION`, `COMPLETENESS`,
`CLARITY` (each 0–100) and a `VERDICT` line. The overall score is
0.4 × accuracy + 0.3 × completeness + 0.3 × clarity minus half the
hallucination score, kept between 0 and 100. When a non-empty reply
yields neither an accuracy nor a hallucination score, every score is
set to 50 and the verdict says the reply could not be parsed.
`run_judge_tool` returns an empty string when the judge cannot start,
fails or times out. `best_tool(scores)` picks the tool with the highest
positive overall score.

## Code audit (`palm.audit`)

```python
from palm.audit import audit_target, summarize

issues = audit_target("src")
errors, warnings, infos = summarize(issues)
```

Given a directory, `audit_target` checks every `.go`, `.py`, `.js`,
`.ts` and `.tsx` file of up to 512 KB beneath it; given a file, it
checks that file. Findings cover placeholder TODOs, truncated
comments, bare `pass` in Python, `console.log` in JavaScript and
TypeScript, debug prints, hard-coded passwords, API keys and secrets,
blank-identifier assignments in Go, and lines over 200 bytes. Each
finding is an `AuditIssue` with a `Severity` of `error`, `warning` or
`info`.

## Benchmarks (`palm.benchmark`)

```python
from palm.benchmark import run_benchmark, compare, split_compare_args

report = run_benchmark("sleep 0.1", iterations=3)
print(report.fastest(), report.slowest(), report.average(), report.success_rate())

first, second = split_compare_args(["ls", "--", "ls", "-la"])
print(compare(first, second, n=3))
```

Times are wall-clock seconds of `sh -c <command>`.

## Pipelines (`palm.pipe`)

```python
from palm.pipe import parse_pipe_segments, run_pipeline

segments = parse_pipe_segments(["echo hello", "|", "tr a-z A-Z"])
print(run_pipeline(segments))
```

Each command reads the previous one's output. `run_pipeline` raises
`PipelineError` when there are fewer than two commands or when a
command cannot start or exits unsuccessfully.

## Project context (`palm.projectcontext`)

`detect_project(root)` guesses the language and framework from the
files in `root`. `init_context(root, tools)` writes `.palm-context.md`
and the instruction files of the given tools (by default Claude Code,
Cursor and Copilot) that do not exist yet. `sync_context(root)`
rewrites every existing tool file from `.palm-context.md` and raises
`FileNotFoundError` when that file is missing.

## Health and state (`palm.health`, `palm.sync`)

`run_health_checks(config_dir)` returns `HealthCheck` results for the
configuration directory, the vault and graph files, git, `$SHELL` and
disk use. `data_files(config_dir)` and `dir_size(path)` report what is
stored.

`export_state(dest, config_dir)` and `import_state(src, config_dir)`
copy palm's state files and `prompts/` directory to and from a backup
directory; `sync_status(config_dir)` reports their sizes. State lives
in `palm_config_dir()`: `$XDG_CONFIG_HOME/palm`, or `~/.config/palm`
when that variable is unset.

## Text helpers (`palm.formatting`)

`progress_bar(percent, width)`, `truncate(text, limit)` and
`render_table(headers, rows)` produce the text used in reports.

## What palm does not do

palm is a library only: it installs no command of its own. It does not
install or remove AI tools, keep a registry of them, store API keys,
track spending or sessions, or run an API proxy. It reads and copies
the state files named above but does not create their contents.