import numpy as np
import array_api_compat as api

backends = [api.array_namespace(np.zeros(1))]

#import torch as tr
#tr.set_default_dtype(tr.float64)
#backends.append(api.array_namespace(tr.zeros(1)))

def rand_data(xp, *shape: int, seed: int = 0):
    data = np.random.default_rng(seed).standard_normal(shape)
    if api.is_torch_namespace(xp):
        return xp.asarray(data)
    else:
        return data

def to_numpy(x) -> np.ndarray:
    return np.asarray(api.to_device(x, "cpu"))

def max_distance(vals, ref) -> float:
    """Largest distance of an eigenvalue in vals to its closest counterpart in ref."""
    vals, ref = to_numpy(vals), to_numpy(ref)
    if vals.size == 0:
        return 0.0
    return float(np.max(np.min(np.abs(vals[:,None] - ref[None,:]), axis=1)))
