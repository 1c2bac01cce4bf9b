# b3history

Load trade-by-trade history files published by the B3 exchange into an
SQLite database, then ask for a per-ticker summary: the highest traded price
and the largest quantity traded in a single day.

## Installation

```
pip install .
```

To run the tests as well:

```
pip install ".[test]"
pytest
```

## Storage

Trades are kept in SQLite. The database is named by the `DATABASE_URL`
environment variable, which may be:

- a plain file path, such as `trades.db`;
- `sqlite:///path/to/trades.db` or `sqlite://path/to/trades.db`;
- `sqlite://` or `:memory:`, for a database held in memory by the process.

An empty or unset `DATABASE_URL` is an error, and so is a URL of any other
scheme. The command creates the `trade` table if it is missing.

## Command line

The package installs one command, `b3-processor`, with two subcommands. It
exits with status 0 on success. On failure it prints `error: <message>` to
standard error and exits with status 1.

### Loading files

```
DATABASE_URL=trades.db b3-processor process -f trades-2025-06-02.txt -f trades-2025-06-03.txt
```

`-f` / `--file` is required. It may be given more than once, and each value
may also hold several paths separated by commas. The command prints
`Processing files: [...]`. Then each file is read in its own thread, and a
pool of workers writes the trades to the database in batches.

Lines that cannot be parsed are logged and skipped. If a file cannot be
opened or a batch cannot be written, the other files and batches still go
ahead. The command then fails with the first error it met.

Each data line is a delimited record of at least nine fields. The fields
used are:

| Position (from 0) | Meaning                                           |
|-------------------|---------------------------------------------------|
| 1                 | instrument code (ticker)                          |
| 3                 | trade price, with `,` as decimal separator        |
| 4                 | traded quantity (a 32-bit integer)                |
| 5                 | closing time, stored as given                     |
| 8                 | trade date, `YYYY-MM-DD`, stored as midnight UTC  |

Files are read as UTF-8, and undecodable bytes are replaced. A line whose
field count differs from the header's is skipped. When there is no header,
the first data line's field count is used instead.

### Querying

```
DATABASE_URL=trades.db b3-processor query --ticker WINQ25
DATABASE_URL=trades.db b3-processor query --ticker WINQ25 --date 2025-06-01
```

`--ticker` is required. `--date` is optional and must be `YYYY-MM-DD`. It
limits the summary to trades whose stored date is at or after midnight of
that day in the `America/Sao_Paulo` time zone. Trade dates are stored as
midnight UTC, which is earlier than midnight in São Paulo. So trades dated
on the given day itself fall before that instant, and only later days are
counted.

This option needs the system's time zone database. Without it the command
fails with `failed to load timezone`.

The result looks like:

```
Querying data for ticker: WINQ25, starting from: None
Summary Trade Result:
 Ticker: WINQ25
 Max Range Value: 140750.00
 Max Daily Volume: 7
```

When no trade of the ticker matches, the query fails with
`no trades found for ticker ...`.

## Configuration

Settings come from environment variables:

| Variable             | Default             | Purpose                                        |
|----------------------|---------------------|------------------------------------------------|
| `DATABASE_URL`       | none (required)     | the SQLite database, as described above        |
| `CSV_DELIMITER`      | `;`                 | field separator; its first character is used   |
| `SKIP_HEADER`        | `true`              | skip the first line of each file               |
| `BATCH_SIZE`         | `1000`              | trades per database write (at least 1)         |
| `NUM_WORKERS`        | twice the CPU count | number of writer workers (at least 1)          |
| `MAX_CHANNEL_BUFFER` | `10000`             | trades held between readers and writers        |
| `TICKER_SECONDS`     | `2`                 | how often a partial batch is flushed (at least 1) |

An integer variable that does not parse falls back to its default. A value
that parses but is below its minimum raises `ValueError`. A boolean variable
is true for `true`, `1` or `yes`, in any case, and false for anything else.

## Library use

The pieces behind the command can be used directly:

```python
from datetime import datetime, timezone

from b3history.finder import Finder
from b3history.processor import Processor, ProcessorSettings
from b3history.repository import SqlTradeRepository

repo = SqlTradeRepository("sqlite:///trades.db")
repo.create_schema()

Processor(repo, ProcessorSettings(batch_size=500, num_workers=4)).process_files(["trades.txt"])

summary = Finder(repo).get_summary("WINQ25", datetime(2025, 6, 1, tzinfo=timezone.utc))
print(summary.ticker, summary.max_range_value, summary.max_daily_volume)
```

- `b3history.cli.Application` wires a `Processor` and a `Finder` to one
  repository. `Application.from_env()` opens the database named by
  `DATABASE_URL` and creates its schema.
- `b3history.parser.parse_txt_file(path, now, stop=None)` yields `TradeRecord`
  values from a single file. It stops early once the `threading.Event` `stop`
  is set.
- `b3history.parser.map_record(record, now)` turns one record's fields into a
  `TradeRecord`. It raises `RecordError`, a `ValueError`, when a field is
  malformed.
- `b3history.repository.TradeRepository` is the abstract interface that the
  processor and finder use. Implement `connection`, `save_batch` and
  `find_summary` to store trades elsewhere.
- `b3history.env` holds the helpers that read the settings above:
  `get_env_int`, `get_env_bool` and `get_env_char`.

## What it does not do

The only storage is SQLite; no other database server is supported. Trades
are only ever added. Nothing marks them deleted, removes them, or skips
duplicates when a file is loaded twice.