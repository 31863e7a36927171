# cli.py

"""
Точка входа для запуска IndexPing без установки пакета.

Пример запуска:
    python cli.py --config indexnow.yaml submit https://example.com/blog/post --mode created
    python cli.py submit-all --json reports/submission.json --html reports/submission.html
"""
from index_ping.cli import cli


if __name__ == '__main__':
    cli()
