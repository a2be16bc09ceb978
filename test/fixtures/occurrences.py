import polars as pl


def mock_duplicate_records_df() -> pl.DataFrame:
    """
    Creates three occurrence records, the first two identical.
    """
    return pl.DataFrame(
        {
            "latitude": [34.5, 34.5, 35.1],
            "longitude": [-118.1, -118.1, -118.5],
            "subcatchment_id": [101, 101, 102],
            "year": [2021, 2021, 2021],
            "species": ["A", "A", "B"],
        }
    )


def mock_gbif_df() -> pl.DataFrame:
    """
    Creates GBIF-like records, each failing at most one cleaning step.

    Rows:
        0: clean
        1: coordinatePrecision at the threshold
        2: placeholder uncertainty 9999
        3: repeats row 0 on coordinates, speciesKey and datasetKey
        4: missing year
        5: empty species
        6: latitude out of range
        7: clean, uncertainty 301 but below the threshold
    """
    return pl.DataFrame(
        {
            "decimalLatitude": [48.2, 47.5, 45.3, 48.2, 44.8, 46.0, 95.0, 45.0],
            "decimalLongitude": [16.4, 19.0, 19.8, 16.4, 20.5, 21.0, 20.0, 22.0],
            "speciesKey": [1, 2, 3, 1, 4, 5, 6, 7],
            "datasetKey": ["d1", "d1", "d2", "d1", "d2", "d2", "d1", "d3"],
            "year": [2020, 2019, 2021, 2020, None, 2018, 2017, 2016],
            "species": [
                "Hucho hucho",
                "Alburnus alburnus",
                "Perca fluviatilis",
                "Hucho hucho",
                "Acipenser ruthenus",
                "",
                "Esox lucius",
                "Cottus gobio",
            ],
            "coordinatePrecision": [None, 0.01, None, None, None, None, None, 0.5],
            "coordinateUncertaintyInMeters": [
                10.0,
                None,
                9999.0,
                10.0,
                None,
                None,
                None,
                301.0,
            ],
        }
    )
