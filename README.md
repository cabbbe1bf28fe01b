# minish

`minish` is a small interactive shell for POSIX systems. It reads command
lines, splits them into tokens, builds a syntax tree and runs it with
`fork`, `execve` and pipes.

## Features

- Simple commands found on `PATH`, or given as `/absolute` or `./relative` paths
- Pipelines: `ls | grep py | wc -l`
- Logical operators: `make && ./run || echo failed`
- Subshells in parentheses, with their own redirections: `(cd /tmp && ls) > out.txt`
- Redirections: `<`, `>`, `>>`, and here-documents with `<<`
- Variable expansion: `$NAME`, and `$?` for the last exit status, inside
  bare words and double quotes; single quotes are taken literally
- Wildcards: a word containing `*` expands to the matching names in the
  current directory, sorted; if nothing matches the word is kept as it is
- Built-in commands: `echo` (with `-n`), `cd` (with `~` and `-`), `pwd`,
  `export`, `unset`, `env` and `exit`
- `SHLVL` goes up by one at startup and is reset to 1 once it would pass 999

## Installation

```
pip install .
```

## Usage

Start the shell:

```
minish
```

It prompts with `minishell> `. Ctrl-C drops the current line and shows a
new prompt, Ctrl-\ is ignored at the prompt, and Ctrl-D (end of input)
prints `exit` and leaves the shell. `exit N` leaves with status `N`.

```
minishell> export GREETING=hello
minishell> echo "$GREETING world" | tr a-z A-Z
HELLO WORLD
minishell> cat << EOF > notes.txt
first line
EOF
minishell> ls *.txt && echo found || echo none
notes.txt
found
minishell> exit 3
```

While a here-document is read the shell shows a `heredoc>` prompt; Ctrl-C
there abandons the command with status 130.

## Using it as a library

The pieces can also be called on their own:

- `minish.tokenizer.tokenize(line, shell)` turns a line into a list of
  `minish.tokens.Token`s ending with an `END` token, or raises `TokenizeError`
- `minish.parser.parse(tokens, shell)` builds a tree of `CommandNode`,
  `BinaryNode` and `SubshellNode` (from `minish.syntax`), or raises `ParseError`
- `minish.executor.execute(node, shell, in_fd=-1, out_fd=-1)` runs a tree and
  returns its exit status
- `minish.shell.run_line(line, shell)` does all three for one line of input
  and returns the status, or `None` when nothing ran
- `minish.builtins` holds the built-in commands; `exit` raises `ShellExit`

`shell` is a `minish.environment.ShellState`, which holds the
`Environment`, the last exit status and the here-document counter. Build
one with `ShellState(Environment.from_environ(os.environ))`.

## Limitations

- No `;` separator, background jobs (`&`) or job control.
- No script files and no `-c` option: the shell only reads from its prompt.
- Variables and wildcards are expanded when the whole line is tokenized, so
  `export A=1 && echo $A` prints the value `A` had before the line ran.
- `unset` removes only the variable named by its first argument.
- Here-documents are written to `/tmp/heredoc_N` files.

## Running the tests

```
pip install .[test]
pytest
```