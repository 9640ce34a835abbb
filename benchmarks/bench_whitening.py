"""Benchmark the whitening strategies on synthetic class-centered data."""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from time import perf_counter
from typing import Iterable, List, Optional

import numpy as np

from sklearn.datasets import make_classification

from regda import center_classes, compute_centroids, whiten_cov, whiten_data


@dataclass
class WhiteningResult:
    method: str
    gamma: Optional[float]
    time: float
    log_det: float
    max_identity_error: float


def _parse_gamma(value: str) -> Optional[float]:
    if value in {None, "", "none", "None"}:
        return None
    try:
        gamma = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("gamma must be 'None' or a float") from exc
    if not 0 <= gamma <= 1:
        raise argparse.ArgumentTypeError("gamma must be in [0, 1]")
    return gamma


def _generate_centered_data(
    *,
    n_samples: int,
    n_features: int,
    n_classes: int,
    dtype: str,
    random_state: int,
):
    n_informative = min(n_features, max(2, n_classes * 2))
    X, y = make_classification(
        n_samples=n_samples,
        n_features=n_features,
        n_informative=n_informative,
        n_redundant=0,
        n_repeated=0,
        n_classes=n_classes,
        n_clusters_per_class=1,
        random_state=random_state,
    )
    X = X.astype(dtype)
    y = y + 1
    means = compute_centroids(X, y, n_classes)
    center_classes(X, means, y)
    return X


def _format_value(value, *, width: int, precision: int = 4) -> str:
    if value is None:
        return f"{'-':>{width}}"
    if isinstance(value, float):
        return f"{value:>{width}.{precision}g}"
    return f"{value:>{width}}"


def _print_results(results: Iterable[WhiteningResult]) -> None:
    results = list(results)
    if not results:
        return

    columns = [
        ("Method", "method", 12),
        ("Gamma", "gamma", 8),
        ("Time (s)", "time", 12),
        ("log det", "log_det", 14),
        ("Max |W'SW - I|", "max_identity_error", 16),
    ]
    header = " | ".join(name.ljust(width) for name, _, width in columns)
    print(header)
    print("-" * len(header))
    for res in results:
        print(
            " | ".join(
                _format_value(getattr(res, attr), width=width)
                for _, attr, width in columns
            )
        )


def benchmark_method(
    Xc: np.ndarray, *, method: str, gamma: Optional[float], df: int
) -> WhiteningResult:
    covariance = Xc.T.astype(np.float64) @ Xc.astype(np.float64) / df
    if gamma:
        p = covariance.shape[0]
        target = np.trace(covariance) / p * np.eye(p)
        covariance = (1 - gamma) * covariance + gamma * target

    if method == "data":
        scratch = Xc.copy()
        tic = perf_counter()
        W, det = whiten_data(scratch, gamma, df=df)
    else:
        scratch = (Xc.T @ Xc / df).astype(Xc.dtype)
        tic = perf_counter()
        W, det = whiten_cov(scratch, gamma)
    elapsed = perf_counter() - tic

    W = W.astype(np.float64)
    identity_error = np.max(np.abs(W.T @ covariance @ W - np.eye(W.shape[0])))
    return WhiteningResult(
        method=f"whiten_{method}",
        gamma=gamma,
        time=elapsed,
        log_det=float(np.log(det)),
        max_identity_error=float(identity_error),
    )


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description=__doc__,
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--n-samples", type=int, default=200_000)
    parser.add_argument("--n-features", type=int, default=100)
    parser.add_argument("--n-classes", type=int, default=5)
    parser.add_argument(
        "--gammas",
        nargs="+",
        type=_parse_gamma,
        default=[None, 0.0, 0.1],
        help="Shrinkage values to benchmark; 'None' disables shrinkage.",
    )
    parser.add_argument(
        "--dtype", default="float64", choices=["float32", "float64"]
    )
    parser.add_argument("--random-state", type=int, default=0)
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    Xc = _generate_centered_data(
        n_samples=args.n_samples,
        n_features=args.n_features,
        n_classes=args.n_classes,
        dtype=args.dtype,
        random_state=args.random_state,
    )
    df = args.n_samples - args.n_classes

    print(
        "Dataset:",
        f"{Xc.shape[0]:,} samples,",
        f"{Xc.shape[1]} features, {args.n_classes} classes ({args.dtype})",
    )

    results: List[WhiteningResult] = []
    for gamma in args.gammas:
        for method in ("data", "cov"):
            results.append(benchmark_method(Xc, method=method, gamma=gamma, df=df))

    print()
    _print_results(results)


if __name__ == "__main__":
    main()
