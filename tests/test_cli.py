import json

import pandas as pd
import pytest

from pysirs.cli import EXIT_BAD_INPUT, EXIT_MISSING_SOURCE, main


def _write_tables(tmp_path, tables):
    paths = {}
    for name, frame in tables.items():
        path = tmp_path / f'{name}.csv'
        frame.to_csv(path, index=False)
        paths[name] = path
    return paths


def test_cli_writes_csv(tmp_path, tables):
    paths = _write_tables(tmp_path, tables)
    output = tmp_path / 'out' / 'sirs.csv'
    code = main([
        '--suspinfect', str(paths['suspinfect']),
        '--bloodgas', str(paths['bloodgasarterial']),
        '--vitals', str(paths['vitals']),
        '--labs', str(paths['labs']),
        '--output', str(output),
        '--log-level', 'WARNING',
    ])
    assert code == 0
    result = pd.read_csv(output)
    assert result['icustay_id'].tolist() == [100, 300, 400]
    assert result['sirs'].tolist() == [1, 2, 0]
    assert result.loc[2, ['temp_score', 'heartrate_score', 'resp_score', 'wbc_score']].isna().all()


def test_cli_with_config_writes_parquet(tmp_path, tables):
    paths = _write_tables(tmp_path, tables)
    config = tmp_path / 'sirs.json'
    config.write_text(json.dumps({
        'sources': {name: path.name for name, path in paths.items()},
    }))
    output = tmp_path / 'sirs.parquet'
    assert main(['--config', str(config), '--output', str(output), '--chunk-size', '2',
                 '--workers', '2']) == 0
    result = pd.read_parquet(output)
    assert result['sirs'].tolist() == [1, 2, 0]


def test_cli_missing_source(tmp_path, tables):
    paths = _write_tables(tmp_path, tables)
    code = main([
        '--suspinfect', str(paths['suspinfect']),
        '--vitals', str(paths['vitals']),
        '--labs', str(paths['labs']),
    ])
    assert code == EXIT_MISSING_SOURCE


def test_cli_bad_columns(tmp_path, tables):
    tables['labs'] = tables['labs'].drop(columns=['wbc_min'])
    paths = _write_tables(tmp_path, tables)
    code = main([
        '--suspinfect', str(paths['suspinfect']),
        '--bloodgas', str(paths['bloodgasarterial']),
        '--vitals', str(paths['vitals']),
        '--labs', str(paths['labs']),
    ])
    assert code == EXIT_BAD_INPUT


def test_cli_stdout(tmp_path, tables, capsys):
    paths = _write_tables(tmp_path, tables)
    main([
        '--suspinfect', str(paths['suspinfect']),
        '--bloodgas', str(paths['bloodgasarterial']),
        '--vitals', str(paths['vitals']),
        '--labs', str(paths['labs']),
    ])
    out = capsys.readouterr().out
    assert out.splitlines()[0] == 'icustay_id,sirs,temp_score,heartrate_score,resp_score,wbc_score'
    assert out.splitlines()[1] == '100,1,0,1,0,0'


def _file_args(paths):
    return [
        '--suspinfect', str(paths['suspinfect']),
        '--bloodgas', str(paths['bloodgasarterial']),
        '--vitals', str(paths['vitals']),
        '--labs', str(paths['labs']),
    ]


def test_cli_negative_chunk_size(tmp_path, tables):
    paths = _write_tables(tmp_path, tables)
    with pytest.raises(SystemExit) as exc:
        main(_file_args(paths) + ['--chunk-size', '-1'])
    assert exc.value.code == 2


def test_cli_zero_workers(tmp_path, tables):
    paths = _write_tables(tmp_path, tables)
    with pytest.raises(SystemExit):
        main(_file_args(paths) + ['--workers', '0'])


def test_cli_missing_config_file(tmp_path):
    assert main(['--config', str(tmp_path / 'absent.json')]) == EXIT_BAD_INPUT


def test_cli_malformed_config(tmp_path):
    config = tmp_path / 'sirs.json'
    config.write_text('{"sources": ')
    assert main(['--config', str(config)]) == EXIT_BAD_INPUT


def test_cli_unsupported_suffix(tmp_path, tables):
    paths = _write_tables(tmp_path, tables)
    labs_json = tmp_path / 'labs.json'
    tables['labs'].to_json(labs_json)
    paths['labs'] = labs_json
    assert main(_file_args(paths)) == EXIT_BAD_INPUT
