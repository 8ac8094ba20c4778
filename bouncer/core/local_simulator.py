# ABOUTME: Local simulator client to run strategies without the live API
# ABOUTME: Mimics BouncerAPIClient interface for start/decide-and-next/close

import math
import uuid
import random
import logging
from typing import Dict, Optional, Any

from .domain import GameState, Person, Constraint, AttributeStatistics, VENUE_CAPACITY, MAX_REJECTIONS
from .api_client import BouncerAPIError, GameFinishedError, parse_person
from ..config import ConfigManager


logger = logging.getLogger(__name__)


class LocalSimulatorClient:
    """Local simulator that mirrors the BouncerAPIClient interface.

    Generates people based on scenario expected_frequencies and (optionally)
    expected_correlations. For two-attribute scenarios, uses the requested
    correlation to construct a joint distribution; otherwise falls back to
    independent sampling by marginal frequencies. The simulator keeps its own
    authoritative counts, the way the live server does.
    """

    def __init__(self, seed: Optional[int] = None, config: Optional[ConfigManager] = None,
                 venue_capacity: int = VENUE_CAPACITY, max_rejections: int = MAX_REJECTIONS):
        self.random = random.Random(seed)
        self._sessions: Dict[str, Dict[str, Any]] = {}
        self.config = config or ConfigManager()
        self.venue_capacity = venue_capacity
        self.max_rejections = max_rejections

    def start_new_game(self, scenario: int) -> GameState:
        scenario_config = self.config.load_scenario(scenario)

        name = scenario_config.get('name', f'Scenario {scenario}')
        ef = scenario_config.get('expected_frequencies', {})
        ec = scenario_config.get('expected_correlations') or {}
        constraints_cfg = scenario_config.get('constraints', [])

        constraints = [Constraint(c['attribute'], int(c['min_count'])) for c in constraints_cfg]
        statistics = AttributeStatistics(
            frequencies={k: float(v) for k, v in ef.items()},
            correlations={a: {b: float(ec.get(a, {}).get(b, 0.0)) for b in ef.keys()} for a in ef.keys()}
        )

        game_id = str(uuid.uuid4())
        game_state = GameState(
            game_id=game_id,
            scenario=scenario,
            constraints=constraints,
            statistics=statistics,
            venue_capacity=self.venue_capacity,
            max_rejections=self.max_rejections,
        )

        self._sessions[game_id] = {
            'sampler': self._build_joint_sampler(statistics),
            'constraints': constraints,
            'current': None,
            'admitted': 0,
            'rejected': 0,
            'admitted_attributes': {c.attribute: 0 for c in constraints},
            'status': 'running',
        }

        logger.info(f"[Local] Started new game {game_id[:8]} for scenario {scenario} ({name})")
        return game_state

    def decide_and_next(self, game_state: GameState, person_index: int,
                        accept: Optional[bool] = None) -> Dict[str, Any]:
        sess = self._sessions.get(game_state.game_id)
        if sess is None:
            raise BouncerAPIError(f"Unknown game {game_state.game_id}")
        if sess['status'] != 'running':
            raise GameFinishedError(f"Game {game_state.game_id[:8]} is already finished")

        current = sess['current']
        if current is None:
            sess['current'] = self._draw(sess, 0)
            return self._running(sess)

        if accept is None:
            return self._running(sess)

        if person_index != current['personIndex']:
            raise BouncerAPIError(f"Expected decision for person {current['personIndex']}, got {person_index}")

        if accept:
            sess['admitted'] += 1
            for attr, has in current['attributes'].items():
                if has and attr in sess['admitted_attributes']:
                    sess['admitted_attributes'][attr] += 1
        else:
            sess['rejected'] += 1

        if sess['admitted'] >= self.venue_capacity:
            unmet = [c.attribute for c in sess['constraints']
                     if sess['admitted_attributes'][c.attribute] < c.min_count]
            if unmet:
                sess['status'] = 'failed'
                return {"status": "failed", "reason": f"Venue full with unmet constraints: {', '.join(unmet)}",
                        "admittedCount": sess['admitted'], "rejectedCount": sess['rejected']}
            sess['status'] = 'completed'
            return {"status": "completed", "rejectedCount": sess['rejected'], "nextPerson": None}

        if sess['rejected'] >= self.max_rejections:
            sess['status'] = 'failed'
            return {"status": "failed", "reason": "Maximum rejections reached",
                    "admittedCount": sess['admitted'], "rejectedCount": sess['rejected']}

        sess['current'] = self._draw(sess, current['personIndex'] + 1)
        return self._running(sess)

    def get_first_person(self, game_state: GameState) -> Optional[Person]:
        response = self.decide_and_next(game_state, 0)
        if response["status"] != "running":
            return None
        return parse_person(response.get("nextPerson"))

    def close(self):
        self._sessions.clear()

    # --- Internal helpers ---
    def _draw(self, sess: Dict[str, Any], index: int) -> Dict[str, Any]:
        return {"personIndex": index, "attributes": sess['sampler']()}

    def _running(self, sess: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "status": "running",
            "admittedCount": sess['admitted'],
            "rejectedCount": sess['rejected'],
            "nextPerson": dict(sess['current']),
        }

    def _build_joint_sampler(self, stats: AttributeStatistics):
        keys = list(stats.frequencies.keys())
        if len(keys) == 2:
            a, b = keys
            pa = float(stats.frequencies.get(a, 0.0))
            pb = float(stats.frequencies.get(b, 0.0))
            r = float(stats.correlations.get(a, {}).get(b, 0.0))
            return self._sampler_two_attrs(a, b, pa, pb, r)
        return self._sampler_independent(keys, stats.frequencies)

    def _sampler_independent(self, keys, freqs):
        def sample() -> Dict[str, bool]:
            return {k: (self.random.random() < float(freqs.get(k, 0.0))) for k in keys}
        return sample

    def _sampler_two_attrs(self, a: str, b: str, pa: float, pb: float, corr: float):
        # Joint P11 from the Pearson correlation of two Bernoulli variables
        denom = math.sqrt(max(pa*(1-pa), 1e-9) * max(pb*(1-pb), 1e-9))
        p11 = pa*pb + corr * denom
        p11 = max(0.0, min(p11, min(pa, pb)))
        p10 = max(0.0, pa - p11)
        p01 = max(0.0, pb - p11)
        p00 = 1.0 - (p11 + p10 + p01)
        if p00 < 0:
            total = max(1e-9, p11 + p10 + p01)
            p11, p10, p01 = (p11/total*0.999, p10/total*0.999, p01/total*0.999)
            p00 = 1.0 - (p11 + p10 + p01)
        cdf = [p00, p00+p10, p00+p10+p01, 1.0]

        def sample() -> Dict[str, bool]:
            u = self.random.random()
            if u < cdf[0]:
                return {a: False, b: False}
            elif u < cdf[1]:
                return {a: True, b: False}
            elif u < cdf[2]:
                return {a: False, b: True}
            else:
                return {a: True, b: True}

        return sample
