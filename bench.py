import cProfile
import pstats

from lambdapad import ReductionStats, Snapshot, L, V


def main():
    succ = L("n", "f", "x")._("f").call(V("n").call("f").call("x")).build()
    zero = L("f", "x")._("x").build()

    stats = ReductionStats()
    term = Snapshot.of(zero)
    for i in range(30):
        term = Snapshot.of(succ(term.term)).reduce(stats=stats)
    print(f"{stats.steps} steps, {stats.visited} nodes visited")


if __name__ == "__main__":
    with cProfile.Profile() as profile:
        main()
        print("bench done")
        results = pstats.Stats(profile)
        results.sort_stats(pstats.SortKey.TIME)
        results.dump_stats("results.profile")
