import os

DATA_DIR = os.path.join(os.path.dirname(__file__), 'fixtures')


def get_data(*paths):
    return os.path.join(DATA_DIR, *paths)


def read_rows(filename):
    """
    read a tab-delimited output file into a list of rows keyed by column name
    """
    with open(filename, 'r') as fh:
        lines = [line.rstrip('\n') for line in fh.readlines() if line.strip()]
    header = lines[0].split('\t')
    return [dict(zip(header, line.split('\t'))) for line in lines[1:]]
