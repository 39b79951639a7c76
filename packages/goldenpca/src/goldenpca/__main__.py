"""
goldenpca — run the golden reference on a random batch.

    python -m goldenpca --samples 32 --features 8 --count 4
    python -m goldenpca --samples 32 --features 8 --count 4 --seed 7 --sort
    python -m goldenpca --samples 32 --features 8 --count 4 --benchmark
    python -m goldenpca --samples 32 --features 8 --count 4 --output golden.parquet
    python -m goldenpca --samples 32 --features 8 --count 4 --config overrides.yaml --debug
"""

import argparse
import logging
import sys
from pathlib import Path


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='goldenpca',
        description='Covariance + shifted-QR eigendecomposition golden reference.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
examples:
  goldenpca --samples 32 --features 8 --count 4            Random batch, summary only
  goldenpca --samples 32 --features 8 --count 4 --sort     Print eigenvalues descending
  goldenpca --samples 32 --features 8 --count 4 --output golden.parquet
""",
    )
    parser.add_argument('--samples', type=int, required=True, help='Rows per sample matrix')
    parser.add_argument('--features', type=int, required=True, help='Columns per sample matrix')
    parser.add_argument('--count', type=int, default=1, help='Batch size (default: 1)')
    parser.add_argument('--seed', type=int, default=None, help='RNG seed for the random inputs')
    parser.add_argument('--benchmark', action='store_true',
                        help='Lift the iteration bound; every solve runs to convergence')
    parser.add_argument('--debug', action='store_true',
                        help='Log intermediate covariance/eigen state')
    parser.add_argument('--normalize', action='store_true',
                        help='Divide covariance by (samples - 1)')
    parser.add_argument('--sort', action='store_true',
                        help='Report eigenvalues sorted descending')
    parser.add_argument('--config', type=str, default=None, help='YAML config overrides')
    parser.add_argument('--output', type=str, default=None,
                        help='Write flattened results to this parquet file')
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format='%(levelname)s %(name)s: %(message)s',
    )

    import copy

    import numpy as np

    from goldenpca.checks import orthogonality_error, reconstruction_error
    from goldenpca.config import CONFIG, load_config
    from goldenpca.flatten import to_frame
    from goldenpca.generate import generate_sample_matrices
    from goldenpca.golden import GoldenPCA
    from goldenpca.postprocess import sort_batch

    try:
        config = load_config(args.config) if args.config else copy.deepcopy(CONFIG)
        if args.normalize:
            config['covariance']['normalize'] = True

        matrices = generate_sample_matrices(
            args.samples, args.features, args.count,
            seed=args.seed if args.seed is not None else config['generator']['seed'],
            low=config['generator']['low'],
            high=config['generator']['high'],
        )
        pca = GoldenPCA(
            args.samples, args.features, args.count,
            debug=args.debug,
            benchmark=args.benchmark,
            input_matrices=matrices,
            config=config,
        )
    except (ValueError, FileNotFoundError) as e:
        print(f"Error: {e}")
        return 1

    pca.compute_covariance_matrix()
    pca.compute_eigen_values_and_vectors()

    eigenvalues = pca.eigenvalues
    if args.sort:
        eigenvalues, _ = sort_batch(pca.eigenvalues, pca.eigenvectors)

    worst_orth = max(orthogonality_error(v) for v in pca.eigenvectors)
    worst_recon = max(
        reconstruction_error(c, lam, v)
        for c, lam, v in zip(pca.covariance_matrices, pca.eigenvalues, pca.eigenvectors)
    )

    print(f"GoldenPCA: {args.count} × ({args.samples} × {args.features})"
          f"{'  [benchmark]' if args.benchmark else ''}")
    for i in range(args.count):
        status = 'converged' if pca.converged[i] else 'NOT converged'
        values = np.array2string(eigenvalues[i], precision=6, max_line_width=120)
        print(f"  #{i}: {int(pca.iterations[i]):5d} iterations, {status}  λ={values}")
    print(f"  worst orthogonality error:  {worst_orth:.3e}")
    print(f"  worst reconstruction error: {worst_recon:.3e}")

    if args.output:
        output = Path(args.output).expanduser()
        output.parent.mkdir(parents=True, exist_ok=True)
        to_frame(pca, include_vectors=True).write_parquet(output)
        print(f"  wrote {output}")

    return 0 if bool(np.all(pca.converged)) else 2


if __name__ == "__main__":
    sys.exit(main())
