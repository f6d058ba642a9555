from putioarr.main import entrypoint

if __name__ == "__main__":
    entrypoint()
