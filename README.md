# prockit

Small command-line tools for looking at processes and kernel state on Linux,
in the style of the classic procps utilities.

## Installation

```
pip install .
```

For the tests:

```
pip install ".[test]"
pytest
```

## Commands

| Command   | What it does                                                         |
|-----------|----------------------------------------------------------------------|
| `slabtop` | Prints kernel slab cache statistics from `/proc/slabinfo`            |
| `snice`   | Changes the priority of processes picked by command, pid, tty, user  |
| `sysctl`  | Reads and writes kernel parameters under `/proc/sys`                 |
| `top`     | Prints a table of running processes                                  |
| `w`       | Shows who is logged on and what they are doing                       |
| `watch`   | Runs a command over and over at a fixed interval                     |

### slabtop

```
slabtop --once
slabtop --sort u
```

Prints a five-line summary followed by one line per cache. Sort keys:
`a` active objects, `b` objects per slab, `c` and `s` object size,
`l` slabs, `v` active slabs, `n` name, `p` pages per slab, `u` cache
utilisation, `o` (or any other letter) number of objects, the default.
Caches are listed in descending order. Reading `/proc/slabinfo` usually
needs root; when it cannot be read the command exits with status 1.

### snice

```
snice +4 -u someone
snice 10 -p 1234 -v
snice -L
snice -l
```

The priority is `+N` to add N to the current nice value, `-N` to subtract
N, or a bare `N` to set it. Without one, `+4` is used. Processes are
selected with `-c/--command`, `-p/--pid`, `-t/--tty` and `-u/--user`, each
of which may be repeated. `-v` prints a table of terminal, user, pid,
command and result for every process changed. `-l` and `-L` print the
signal names as a list or a numbered table. If no process could be
changed the command exits with status 1.

### sysctl

```
sysctl kernel.ostype fs.overflowuid
sysctl -n kernel.ostype
sysctl -a
sysctl vm.swappiness=10
```

`-N` prints only names, `-n` only values, `-e` ignores errors and `-q`
keeps quiet when setting values. `-a` (also `-A`, `-X`) lists every
variable. Errors reading or writing a key are reported and make the exit
status 1. On platforms other than Linux the command exits with an error.

### top

```
top
top -p 1,2,3
top -U root
top -u 0
top -w 120
top -O
```

Shows PID, USER, PR, NI, VIRT, RES, SHR, S, %CPU, %MEM, TIME+ and
COMMAND for each process. `-p` restricts to a list of pids, `-U` to a real
user and `-u` to an effective user (by name or uid); these three cannot be
combined. `-w` cuts or pads each line to the given width. `-O` prints the
known field names.

### w

```
w
w --short
w --no-header
```

Lists each logged-in session with its terminal, login time, idle time
(from the terminal's access time), JCPU, PCPU and command line.

### watch

```
watch -n 1.5 "date"
```

The command runs through `sh -c`. The interval is in seconds and accepts
`.` or `,` as the decimal separator; an interval with a fractional part is
never shorter than 0.1 seconds. The default is 2 seconds. The loop stops
as soon as the command exits with a non-zero status.

## Library use

The parsers behind the tools can be used on their own:

```python
from prockit.slabinfo import SlabInfo
from prockit.priority import Priority
from prockit.watch import parse_interval

with open("/proc/slabinfo") as fh:
    info = SlabInfo.parse(fh.read())   # ValueError if the layout is unknown
print(info.sort("n", ascending=True).names())
print(info.total_objs())

print(Priority.parse("-4").apply(10))  # 6
print(parse_interval("1,5"))           # 0:00:01.500000
```

`prockit.sysctl` offers `get_sysctl`, `set_sysctl` and `handle_one_arg`,
which take an optional `root` directory in place of `/proc/sys`.

## What it does not do

- `top` and `slabtop` print one snapshot and exit; there is no interactive,
  continuously refreshing screen.
- `watch` does not clear the screen, show a title or highlight differences;
  its other options (`-b`, `-c`, `-d`, `-e`, `-g`, `-p`, `-x` and so on) are
  accepted but have no effect.
- The `w` options `-u`, `-f`, `-o`, `-i` and `-p` are accepted but have no
  effect.