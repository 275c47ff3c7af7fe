"""
Tests for the command line entry point.
"""

import argparse
import pytest
import json
import sys
import os

# Add the parent directory to the path to import the module
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import happymath.__main__ as cli
from happymath.__main__ import main, partition_arg, read_rows
from happymath.components.config import ConfigManager


@pytest.fixture(autouse=True)
def fresh_config(monkeypatch):
    for name in ('HAPPY_FEATURES', 'HAPPY_TARGET', 'HAPPY_K', 'HAPPY_SEED', 'LOG_LEVEL'):
        monkeypatch.delenv(name, raising=False)
    ConfigManager.reset()
    yield
    ConfigManager.reset()


@pytest.fixture
def records_file(tmp_path):
    rows = []
    for year in (2018, 2019):
        for i, (score, gdp) in enumerate([(7.5, 1.5), (7.0, 1.4), (3.5, 0.2), (4.0, 0.3)]):
            rows.append({
                'country_name': f"Country {i}",
                'year': year,
                'happiness_score': score,
                'economy_gdp_per_capita': gdp,
                'social_support': gdp + 0.1
            })

    path = tmp_path / 'records.json'
    path.write_text(json.dumps(rows))
    return str(path)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / 'config.yaml'
    path.write_text("features:\n  - economy_gdp_per_capita\n  - social_support\n")
    return str(path)


def run(argv, capsys):
    code = main(argv)
    return code, json.loads(capsys.readouterr().out)


class TestMain:

    def test_associations(self, records_file, config_file, capsys):
        code, result = run(['associations', '--records', records_file,
                            '--config', config_file, '--partition', 'latest'], capsys)

        assert code == 0
        assert result['partition'] == 2019
        assert result['num_transactions'] == 4
        assert result['rules']

    def test_kmeans(self, records_file, config_file, capsys):
        code, result = run(['kmeans', '--records', records_file, '--config', config_file,
                            '--k', '2', '--seed', '1', '--partition', '2018'], capsys)

        assert code == 0
        assert result['k'] == 2
        assert sum(c['size'] for c in result['clusters']) == 4

    def test_kmeans_insufficient(self, records_file, config_file, capsys):
        code, result = run(['kmeans', '--records', records_file, '--config', config_file,
                            '--k', '6', '--partition', '2018'], capsys)

        assert code == 1
        assert result['error'] == 'insufficient_data'

    def test_correlations(self, records_file, config_file, capsys):
        code, result = run(['correlations', '--records', records_file,
                            '--config', config_file, '--partition', '2019'], capsys)

        assert code == 0
        assert len(result['correlations']) == 2
        assert result['partition'] == 2019


    def test_invalid_partition(self, records_file, capsys):
        with pytest.raises(SystemExit) as excinfo:
            main(['kmeans', '--records', records_file, '--partition', '20x'])

        assert excinfo.value.code == 2
        assert 'latest' in capsys.readouterr().err


class TestLogLevel:

    @pytest.fixture
    def levels(self, monkeypatch):
        levels = []
        monkeypatch.setattr(cli, 'setup_logging', levels.append)
        return levels

    def test_default_from_config(self, records_file, config_file, levels, capsys):
        run(['correlations', '--records', records_file, '--config', config_file], capsys)

        assert levels == ['warn']

    def test_env_var(self, records_file, config_file, levels, monkeypatch, capsys):
        monkeypatch.setenv('LOG_LEVEL', 'DEBUG')
        run(['correlations', '--records', records_file, '--config', config_file], capsys)

        assert levels == ['debug']

    def test_flag_wins(self, records_file, config_file, levels, monkeypatch, capsys):
        monkeypatch.setenv('LOG_LEVEL', 'DEBUG')
        run(['correlations', '--records', records_file, '--config', config_file,
             '--log-level', 'ERROR'], capsys)

        assert levels == ['ERROR']


class TestPartitionArg:

    def test_values(self):
        assert partition_arg('2019') == 2019
        assert partition_arg('latest') == 'latest'

    def test_invalid(self):
        with pytest.raises(argparse.ArgumentTypeError):
            partition_arg('20x')

class TestReadRows:

    def test_wrapped_records(self, tmp_path):
        path = tmp_path / 'rows.json'
        path.write_text(json.dumps({'records': [{'country_name': 'A'}]}))

        assert read_rows(str(path)) == [{'country_name': 'A'}]

    def test_invalid_file(self, tmp_path):
        path = tmp_path / 'rows.json'
        path.write_text(json.dumps("nope"))

        with pytest.raises(ValueError):
            read_rows(str(path))
