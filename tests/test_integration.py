"""Integration tests for end-to-end workflows."""

import json
import logging
import sys

import pytest

from fpl_live import Chip, RankingView, Substitution, load_snapshot, run_engine
from fpl_live.config import (
    clear_config_cache,
    get_config,
    get_default_view,
    load_config,
)
from fpl_live.engine import LiveTableEngine
from fpl_live.logging_config import get_logger, setup_logging
from fpl_live.models import Authoritative, NeedsLocalResolution
from fpl_live.schemas import EntryPicks, SnapshotBundle
from fpl_live.snapshot import build_snapshot, roster_from_picks
from fpl_live.utils import load_json, save_json, validate_json_file

# element_type per squad slot: GK, 4 DEF, 4 MID, 2 FWD, bench GK/MID/DEF/FWD
ELEMENT_TYPES = {
    1: 1, 2: 2, 3: 2, 4: 2, 5: 2, 6: 3, 7: 3, 8: 3, 9: 3, 10: 4, 11: 4,
    12: 1, 13: 3, 14: 2, 15: 4,
}


def _picks(chip=None, automatic_subs=None, captain=6):
    picks = []
    for slot in range(1, 16):
        multiplier = 1 if slot <= 11 or chip == 'bboost' else 0
        if slot == captain:
            multiplier = 3 if chip == '3xc' else 2
        picks.append({
            'element': slot,
            'position': slot,
            'multiplier': multiplier,
            'is_captain': slot == captain,
            'is_vice_captain': slot == 7,
        })
    return {
        'active_chip': chip,
        'automatic_subs': automatic_subs or [],
        'picks': picks,
        'entry_history': {'event': 22},
    }


def _bundle():
    # Players 1-8 play for team 1, 9-15 for team 2; 97-99 are non-squad
    # players who take all the bonus in the gameweek 22 fixture.
    elements = [
        {'id': pid, 'web_name': f'P{pid}', 'team': 1 if pid <= 8 else 2, 'element_type': et}
        for pid, et in ELEMENT_TYPES.items()
    ]
    elements += [
        {'id': 97, 'web_name': 'Rice', 'team': 1, 'element_type': 3},
        {'id': 98, 'web_name': 'Saliba', 'team': 1, 'element_type': 2},
        {'id': 99, 'web_name': 'Palmer', 'team': 2, 'element_type': 3},
    ]
    live = []
    for pid in ELEMENT_TYPES:
        played = 0 if pid == 2 else 90
        live.append({
            'id': pid,
            'stats': {'minutes': played, 'total_points': 2 if played else 0, 'bps': 5},
        })
    live += [
        {'id': 97, 'stats': {'minutes': 90, 'total_points': 6, 'bps': 40}},
        {'id': 98, 'stats': {'minutes': 90, 'total_points': 6, 'bps': 35}},
        {'id': 99, 'stats': {'minutes': 90, 'total_points': 9, 'bps': 50, 'goals_scored': 1}},
    ]
    return {
        'gameweek': 22,
        'bootstrap': {
            'elements': elements,
            'teams': [
                {'id': 1, 'name': 'Arsenal', 'short_name': 'ARS', 'code': 3},
                {'id': 2, 'name': 'Chelsea', 'short_name': 'CHE', 'code': 8},
            ],
            'events': [
                {'id': 21, 'finished': True},
                {'id': 22, 'is_current': True},
            ],
        },
        'fixtures': [
            {
                'id': 201, 'event': 21, 'team_h': 2, 'team_a': 1,
                'kickoff_time': '2025-01-04T15:00:00Z', 'started': True, 'finished': True,
            },
            {
                'id': 211, 'event': 22, 'team_h': 1, 'team_a': 2,
                'kickoff_time': '2025-01-14T19:30:00Z', 'started': True,
                'finished': False, 'finished_provisional': True,
                'team_h_score': 1, 'team_a_score': 1,
            },
        ],
        'live': {'elements': live},
        'standings': {
            'league': {'id': 539861, 'name': 'Office League'},
            'standings': {
                'results': [
                    {'entry': 1004, 'entry_name': 'No Picks FC', 'player_name': 'D', 'total': 1400},
                    {'entry': 1003, 'entry_name': 'Upstream Subs', 'player_name': 'C', 'total': 1300},
                    {'entry': 1002, 'entry_name': 'Bench Boosters', 'player_name': 'B', 'total': 1200},
                    {'entry': 1001, 'entry_name': 'Local Subs', 'player_name': 'A', 'total': 1100},
                ],
            },
        },
        'managers': {
            '1001': {
                'history': {'current': [{'event': 21, 'points': 50}, {'event': 22, 'points': 10}]},
                'picks': _picks(),
            },
            '1002': {
                'history': {'current': [{'event': 21, 'points': 55}]},
                'picks': _picks(chip='bboost'),
            },
            '1003': {
                'history': {'current': [{'event': 21, 'points': 60}]},
                'picks': _picks(automatic_subs=[{'element_in': 15, 'element_out': 2, 'event': 22}]),
            },
            '1004': {
                'history': {'current': [{'event': 21, 'points': 100}]},
            },
        },
    }


def _write(tmp_path, bundle, name='gw22.json'):
    path = tmp_path / name
    path.write_text(json.dumps(bundle))
    return path


@pytest.fixture
def snapshot_file(tmp_path):
    """Write a snapshot bundle to a temporary file."""
    return _write(tmp_path, _bundle())


class TestSnapshotLoading:
    """Tests for turning upstream payloads into engine inputs."""

    def test_load_snapshot(self, snapshot_file):
        snapshot = load_snapshot(snapshot_file)
        assert snapshot.gameweek == 22
        assert [m.id for m in snapshot.managers] == [1004, 1003, 1002, 1001]
        assert snapshot.rosters[1004] is None
        assert snapshot.rosters[1002].chip is Chip.BENCH_BOOST
        assert snapshot.history[1001] == {21: 50, 22: 10}

    def test_automatic_subs_are_authoritative(self, snapshot_file):
        snapshot = load_snapshot(snapshot_file)
        assert isinstance(snapshot.rosters[1001].upstream_subs, NeedsLocalResolution)
        upstream = snapshot.rosters[1003].upstream_subs
        assert isinstance(upstream, Authoritative)
        assert upstream.substitutions == (Substitution(player_out=2, player_in=15),)

    def test_current_gameweek_detected_when_missing(self):
        bundle = _bundle()
        del bundle['gameweek']
        snapshot = build_snapshot(SnapshotBundle.model_validate(bundle))
        assert snapshot.gameweek == 22

    def test_event_status_takes_precedence(self):
        """Test the event-status payload wins over the events' current flag."""
        bundle = _bundle()
        del bundle['gameweek']
        bundle['event_status'] = {
            'status': [
                {'event': 23, 'date': '2025-01-18', 'bonus_added': False, 'points': ''},
                {'event': 23, 'date': '2025-01-19', 'bonus_added': False, 'points': ''},
            ],
            'leagues': 'Updated',
        }
        snapshot = build_snapshot(SnapshotBundle.model_validate(bundle))
        assert snapshot.gameweek == 23

    def test_empty_event_status_falls_back_to_events(self):
        bundle = _bundle()
        del bundle['gameweek']
        bundle['event_status'] = {'status': [{'event': None}]}
        snapshot = build_snapshot(SnapshotBundle.model_validate(bundle))
        assert snapshot.gameweek == 22

    def test_chip_codes(self):
        picks = EntryPicks.model_validate(_picks(chip='3xc'))
        assert roster_from_picks(1, picks).chip is Chip.TRIPLE_CAPTAIN
        picks = EntryPicks.model_validate(_picks(chip='freehit'))
        assert roster_from_picks(1, picks).chip is Chip.FREE_HIT

    def test_unknown_chip_scores_manager_as_zero(self, tmp_path):
        """Test one manager's unknown chip code doesn't stop the league being ranked."""
        bundle = _bundle()
        bundle['managers']['1001']['picks']['active_chip'] = 'mystery'
        snapshot = load_snapshot(_write(tmp_path, bundle))
        assert snapshot.rosters[1001] is None
        assert snapshot.history[1001] == {21: 50, 22: 10}
        assert snapshot.rosters[1002].chip is Chip.BENCH_BOOST

        result = run_engine(snapshot, period_gameweeks=[21, 22])
        rows = {row.manager_id: row for row in result.standings}
        assert len(rows) == 4
        assert rows[1001].gameweek_points == 0
        assert rows[1001].period_points == 50
        assert rows[1002].gameweek_points == 30

    def test_malformed_pick_scores_manager_as_zero(self, tmp_path):
        bundle = _bundle()
        bundle['managers']['1003']['picks']['picks'][0]['position'] = 16
        bundle['managers']['1002']['history'] = {'current': [{'event': 'twenty-one'}]}
        snapshot = load_snapshot(_write(tmp_path, bundle))
        assert snapshot.rosters[1003] is None
        assert snapshot.rosters[1002] is not None
        assert snapshot.history[1002] == {}

    def test_malformed_bundle_rejected(self, tmp_path):
        """Test shared reference data still has to be valid."""
        bundle = _bundle()
        del bundle['bootstrap']['elements']
        with pytest.raises(ValueError, match='Schema validation failed'):
            load_snapshot(_write(tmp_path, bundle))

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_snapshot(tmp_path / 'missing.json')

    def test_validate_json_file(self, snapshot_file, tmp_path):
        assert validate_json_file(snapshot_file, SnapshotBundle) == (True, None)
        bad = tmp_path / 'bad.json'
        bad.write_text('{not json')
        ok, error = validate_json_file(bad, SnapshotBundle)
        assert ok is False
        assert 'Invalid JSON' in error


class TestEngineRun:
    """Tests for a full engine run over a loaded snapshot."""

    def test_scores(self, snapshot_file):
        result = run_engine(load_snapshot(snapshot_file))

        local = result.rosters[1001]
        assert result.substitutions[1001].confirmed == (Substitution(2, 14),)
        assert local.live_points == 24
        assert local.played == 11

        boosted = result.rosters[1002]
        assert result.substitutions[1002].confirmed == ()
        assert boosted.live_points == 30
        assert boosted.played == 14
        assert boosted.max_countable == 15

        upstream = result.rosters[1003]
        assert result.substitutions[1003].confirmed == (Substitution(2, 15),)
        assert upstream.live_points == 24

        assert result.rosters[1004].live_points == 0

    def test_bonus_goes_to_top_bps(self, snapshot_file):
        result = run_engine(load_snapshot(snapshot_file))
        allocation = result.bonus[211]
        assert allocation.official is False
        assert allocation.bonus == {99: 3, 97: 2, 98: 1}
        assert 201 not in result.bonus

    def test_double_gameweek_bonus_total(self, tmp_path):
        """Test a bonus total over 3 from two fixtures loads and is applied."""
        bundle = _bundle()
        bundle['bootstrap']['teams'].append({'id': 3, 'name': 'Everton', 'short_name': 'EVE', 'code': 11})
        bundle['fixtures'].append({
            'id': 212, 'event': 22, 'team_h': 3, 'team_a': 2,
            'kickoff_time': '2025-01-11T15:00:00Z', 'started': True, 'finished': True,
        })
        for element in bundle['live']['elements']:
            if element['id'] == 99:
                element['stats'].update({'bonus': 5, 'total_points': 20})

        result = run_engine(load_snapshot(_write(tmp_path, bundle)), period_gameweeks=[21, 22])

        assert result.bonus[211].official is True
        assert result.bonus[211].bonus_for(99) == 5
        assert result.bonus[212].official is True
        assert result.rosters[1001].live_points == 24
        assert [row.manager_id for row in result.standings] == [1004, 1002, 1003, 1001]

    def test_default_period_is_current_month(self, snapshot_file):
        result = run_engine(load_snapshot(snapshot_file))
        assert result.period_gameweeks == (21, 22)

    def test_standings(self, snapshot_file):
        result = run_engine(load_snapshot(snapshot_file), period_gameweeks=[21, 22])
        rows = {row.manager_id: row for row in result.standings}

        assert [row.manager_id for row in result.standings] == [1004, 1002, 1003, 1001]
        assert rows[1001].period_points == 74
        assert rows[1002].period_points == 85
        assert rows[1002].rank_delta == 1
        assert rows[1003].rank_delta == -1
        assert rows[1004].gameweek_points == 0
        assert rows[1004].current_rank == 1

    def test_gameweek_view(self, snapshot_file):
        result = run_engine(load_snapshot(snapshot_file), [21, 22], view=RankingView.GAMEWEEK)
        assert result.standings[0].manager_id == 1002
        assert result.standings[-1].manager_id == 1004

    def test_idempotent(self, snapshot_file):
        snapshot = load_snapshot(snapshot_file)
        assert run_engine(snapshot).to_dict() == run_engine(snapshot).to_dict()

    def test_fixture_events(self, snapshot_file):
        engine = LiveTableEngine(load_snapshot(snapshot_file))
        allocations = engine.allocate_bonus()
        events = engine.fixture_events(211, allocations)
        assert [e.name for e in events.goals] == ['Palmer']
        assert [e.name for e in events.bonus] == ['Palmer', 'Rice', 'Saliba']
        assert engine.fixture_events(201, allocations) is None

    def test_save_result(self, snapshot_file, tmp_path):
        result = run_engine(load_snapshot(snapshot_file))
        output = tmp_path / 'out' / 'table.json'
        save_json(output, result)

        saved = load_json(output)
        assert saved['gameweek'] == 22
        assert saved['view'] == 'period'
        assert saved['rosters']['1002']['chip'] == 'bench-boost'
        assert saved['bonus']['211']['bonus'] == {'99': 3, '97': 2, '98': 1}
        assert len(saved['standings']) == 4


class TestCommandLine:
    """Tests for the live_table.py entry point."""

    def test_main_writes_table(self, snapshot_file, tmp_path, monkeypatch, capsys):
        import live_table

        output = tmp_path / 'table.json'
        monkeypatch.setattr(
            sys, 'argv',
            ['live_table.py', str(snapshot_file), '--month', '2025-01', '--view', 'gameweek', '-o', str(output)],
        )
        live_table.main()

        assert 'Bench Boosters' in capsys.readouterr().out
        saved = json.loads(output.read_text())
        assert saved['view'] == 'gameweek'
        assert saved['period_gameweeks'] == [21, 22]

    def test_main_bad_snapshot_exits(self, tmp_path, monkeypatch):
        import live_table

        monkeypatch.setattr(sys, 'argv', ['live_table.py', str(tmp_path / 'missing.json')])
        with pytest.raises(SystemExit) as exc:
            live_table.main()
        assert exc.value.code == 1

    def test_main_trace_option(self, snapshot_file, monkeypatch, capsys):
        import live_table

        monkeypatch.setattr(sys, 'argv', ['live_table.py', str(snapshot_file), '--trace', 'substitutions'])
        live_table.main()

        err = capsys.readouterr().err
        assert 'DEBUG [fpl_live.substitutions]: Manager 1001' in err
        assert 'DEBUG [fpl_live.bonus]' not in err
        setup_logging(log_to_console=False)


class TestConfigAndLogging:
    """Tests for league config loading and logger setup."""

    def test_bundled_config(self):
        clear_config_cache()
        config = get_config()
        assert config.default_view == 'period'
        assert get_default_view() is RankingView.PERIOD
        assert get_config() is config
        clear_config_cache()

    def test_invalid_config(self, tmp_path):
        path = tmp_path / 'league_config.json'
        path.write_text(json.dumps({'default_view': 'season'}))
        with pytest.raises(ValueError):
            load_config(path)

    def test_unused_config_keys_rejected(self, tmp_path):
        path = tmp_path / 'league_config.json'
        path.write_text(json.dumps({'default_view': 'gameweek', 'refresh_interval_seconds': 30}))
        with pytest.raises(ValueError):
            load_config(path)

    def test_setup_logging_writes_file(self, tmp_path):
        logger = setup_logging(log_dir=tmp_path, level=logging.DEBUG, log_to_file=True, log_to_console=False)
        get_logger('engine').info('Scoring gameweek 22')
        for handler in logger.handlers:
            handler.flush()

        log_files = list(tmp_path.glob('fpl_live_*.log'))
        assert len(log_files) == 1
        assert 'Scoring gameweek 22' in log_files[0].read_text()
        assert get_logger('engine').name == 'fpl_live.engine'

        for handler in logger.handlers:
            handler.close()
        logger.handlers = []

    def test_trace_one_module(self, tmp_path):
        """Test tracing substitutions doesn't turn on DEBUG elsewhere."""
        logger = setup_logging(
            log_dir=tmp_path, log_to_file=True, log_to_console=False, trace_modules=['substitutions'],
        )
        get_logger('substitutions').debug('Manager 1001: P2 (0 mins) -> P14')
        get_logger('bonus').debug('Fixture 211 provisional')
        get_logger('utils').debug('Loaded gw22.json')
        get_logger('engine').info('Scoring gameweek 22')
        for handler in logger.handlers:
            handler.flush()

        text = next(tmp_path.glob('fpl_live_*.log')).read_text()
        assert 'P2 (0 mins) -> P14' in text
        assert 'Fixture 211' not in text
        assert 'Loaded gw22.json' not in text
        assert 'Scoring gameweek 22' in text

        for handler in logger.handlers:
            handler.close()
        logger.handlers = []
        setup_logging(log_to_console=False)
