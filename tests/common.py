from pathlib import Path


TEST_KEYSPACE = 'commerce'
CONFIG_FILE = str(Path(__file__).parent / 'tests_config.yaml')
