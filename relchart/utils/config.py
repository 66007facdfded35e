# relchart/utils/config.py
import os
import yaml

DEFAULTS = {
    "composite_house_system": "whole-sign",
    "parallel_stages": False,
    "max_recommendations": 5,
}

class AttrDict(dict):
    """Dict that also supports attribute access: cfg.parallel_stages and cfg['parallel_stages'] both work."""
    def __getattr__(self, item):
        try:
            return self[item]
        except KeyError as e:
            raise AttributeError(item) from e
    def __setattr__(self, key, value):
        self[key] = value

def _to_attr(obj):
    if isinstance(obj, dict):
        return AttrDict({k: _to_attr(v) for k, v in obj.items()})
    if isinstance(obj, list):
        return [_to_attr(x) for x in obj]
    return obj

def truthy(val):
    if isinstance(val, bool):
        return val
    return str(val).strip().lower() in {"1", "true", "t", "yes", "y", "on"}

def load_config(path: str):
    """
    Load YAML config from `path` on top of DEFAULTS.
    Optional env overrides:
      - RELCHART_COMPOSITE_HOUSES  (composite_house_system)
      - RELCHART_PARALLEL          (parallel_stages)
    Returns an AttrDict for convenient access.
    """
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top-level YAML must be a mapping")

    merged = dict(DEFAULTS)
    merged.update(data)

    houses = os.getenv("RELCHART_COMPOSITE_HOUSES")
    if houses:
        merged["composite_house_system"] = houses
    parallel = os.getenv("RELCHART_PARALLEL")
    if parallel is not None:
        merged["parallel_stages"] = truthy(parallel)

    merged["parallel_stages"] = truthy(merged["parallel_stages"])
    merged["max_recommendations"] = int(merged["max_recommendations"])
    return _to_attr(merged)

def default_config():
    """DEFAULTS as an AttrDict, for apps started without a config file."""
    return _to_attr(dict(DEFAULTS))
