import os


# File I/O
# ----------------------------------------------------------------------------------------------------------------------


def read_file(path: str, file_name: str = None) -> str:
    if path is None:
        file_path = file_name
    elif file_name is None:
        file_path = path
    else:
        file_path = os.path.join(path, file_name)
    with open(file_path, "r") as f:
        text = f.read()
    return text


def write_file(dir_path: str, file_name: str, text: str):
    if dir_path is None:
        file_path = file_name
    else:
        file_path = os.path.join(dir_path, file_name)
    with open(file_path, "w") as f:
        f.write(text)
