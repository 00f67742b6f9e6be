# dbdump/defaults.py
"""Default settings - no imports to avoid circular dependencies."""

settings = {
    'default_layout': 'text',
    'null_string': '',          # how null is represented by to_string()
    'null_string_csv': '',      # how null is represented in CSV outputs
    'null_string_text': 'NULL', # how null is represented in plain text output
    'binary_encoding': 'utf-8',  # codec used to turn binary column values into text
    'binary_errors': 'replace',
    'csv_lineterminator': '\n',
    'excel_separator': ';',
    'date_format': '%Y-%m-%d',
    'time_format': '%H:%M:%S',
    'datetime_format': '%Y-%m-%d %H:%M:%S',
    'timestamp_format': '%Y-%m-%d %H:%M:%S.%f',  # with microseconds
    'tz_suffix': ' %z',
    'logging': {
        'directory': './logs',
        'level': 'INFO',
        'format': '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        'timestamp_format': '%Y-%m-%d %H:%M:%S',
        'filename_format': '%Y%m%d_%H%M%S',  # Set to '' for single log file (no timestamp)
        'split_errors': True,
        'console': True,
    }
}
