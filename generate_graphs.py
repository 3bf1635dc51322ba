import argparse

import matplotlib.pyplot as plt

from memory_manager import WritePolicy
from policies import POLICY_NAMES
from simulator import SimulationConfig, VirtualMemorySimulator, read_trace

DEFAULT_FRAME_COUNTS = [1, 2, 3, 4, 6, 8, 12, 16]


def sweep(trace_path, policies=POLICY_NAMES, frame_counts=DEFAULT_FRAME_COUNTS,
          tlb_size=0, write_policy=WritePolicy.WRITE_THROUGH):
    # Each configuration gets a fresh simulator, so runs never share state
    records = list(read_trace(trace_path))
    results = {}
    for policy in policies:
        results[policy] = []
        for num_frames in frame_counts:
            config = SimulationConfig(policy=policy, num_frames=num_frames, tlb_size=tlb_size,
                                      write_policy=write_policy, trace_path=trace_path)
            report = VirtualMemorySimulator(config).run(records)
            results[policy].append(report.stats)
    return results


def plot_sweep(results, frame_counts, output='policy_comparison.png'):
    fig, axes = plt.subplots(1, 2, figsize=(12, 5))
    fig.suptitle('Page Replacement Algorithm Comparison', fontsize=14, fontweight='bold')

    for policy, reports in results.items():
        fault_rates = [(r.fault_rate or 0.0) * 100.0 for r in reports]
        write_backs = [r.write_backs for r in reports]
        axes[0].plot(frame_counts, fault_rates, marker='o', label=policy)
        axes[1].plot(frame_counts, write_backs, marker='o', label=policy)

    axes[0].set_title('Page Fault Rate')
    axes[0].set_ylabel('% of accesses')
    axes[1].set_title('Write-backs (dirty evictions)')
    for ax in axes:
        ax.set_xlabel('Frames')
        ax.set_xticks(frame_counts)
        ax.grid(alpha=0.3)
        ax.legend()

    plt.tight_layout()
    fig.savefig(output, dpi=300, bbox_inches='tight')
    plt.close(fig)
    return output


def main(argv=None):
    parser = argparse.ArgumentParser(description='Sweep frame counts for every policy and plot the results.')
    parser.add_argument('tracefile')
    parser.add_argument('--frames', type=int, nargs='+', default=DEFAULT_FRAME_COUNTS)
    parser.add_argument('--tlb', type=int, default=0)
    parser.add_argument('-wb', action='store_true', help='use write-back instead of write-through')
    parser.add_argument('--output', default='policy_comparison.png')
    args = parser.parse_args(argv)

    write_policy = WritePolicy.WRITE_BACK if args.wb else WritePolicy.WRITE_THROUGH
    print("Running simulations...")
    results = sweep(args.tracefile, frame_counts=args.frames, tlb_size=args.tlb,
                    write_policy=write_policy)

    print(f"{'Algorithm':<10} {'Frames':<8} {'Page Faults':<13} {'Write-backs':<12}")
    print("-" * 45)
    for policy, reports in results.items():
        for num_frames, stats in zip(args.frames, reports):
            print(f"{policy:<10} {num_frames:<8} {stats.page_faults:<13} {stats.write_backs:<12}")

    output = plot_sweep(results, args.frames, args.output)
    print(f"\nGraph saved as '{output}'")


if __name__ == '__main__':
    main()
