"""Run all selftests.

Usage:
  python -m selftest.run_all
"""

import importlib


TEST_MODULES = [
    'selftest.test_config',
    'selftest.test_noise',
    'selftest.test_sampler',
    'selftest.test_integrator',
    'selftest.test_audio',
    'selftest.test_simulation',
]


def main():
    failures = []
    for modname in TEST_MODULES:
        try:
            m = importlib.import_module(modname)
            m.main()
            print(f"ok   {modname}")
        except Exception as e:
            failures.append((modname, e))

    if failures:
        print("\nFAILED:")
        for modname, e in failures:
            print(f"- {modname}: {e!r}")
        raise SystemExit(1)

    print("\nOK: all selftests passed")


if __name__ == "__main__":
    main()
