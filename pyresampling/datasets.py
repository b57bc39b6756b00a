"""
Reference datasets for resampling examples and validation.
EXACT copies of the tables shipped with R (datasets::mtcars, bootstrap::law).
"""

import numpy as np

# Motor Trend car road tests, 1974 - selected columns
# From R: mtcars[, c("mpg", "hp", "wt")] - EXACT VALUES
MTCARS_COLUMNS = ("mpg", "hp", "wt")

MTCARS_ROWNAMES = (
    "Mazda RX4", "Mazda RX4 Wag", "Datsun 710", "Hornet 4 Drive",
    "Hornet Sportabout", "Valiant", "Duster 360", "Merc 240D",
    "Merc 230", "Merc 280", "Merc 280C", "Merc 450SE",
    "Merc 450SL", "Merc 450SLC", "Cadillac Fleetwood", "Lincoln Continental",
    "Chrysler Imperial", "Fiat 128", "Honda Civic", "Toyota Corolla",
    "Toyota Corona", "Dodge Challenger", "AMC Javelin", "Camaro Z28",
    "Pontiac Firebird", "Fiat X1-9", "Porsche 914-2", "Lotus Europa",
    "Ford Pantera L", "Ferrari Dino", "Maserati Bora", "Volvo 142E",
)

mtcars = np.array([
    [21.0, 110.0, 2.620],
    [21.0, 110.0, 2.875],
    [22.8, 93.0, 2.320],
    [21.4, 110.0, 3.215],
    [18.7, 175.0, 3.440],
    [18.1, 105.0, 3.460],
    [14.3, 245.0, 3.570],
    [24.4, 62.0, 3.190],
    [22.8, 95.0, 3.150],
    [19.2, 123.0, 3.440],
    [17.8, 123.0, 3.440],
    [16.4, 180.0, 4.070],
    [17.3, 180.0, 3.730],
    [15.2, 180.0, 3.780],
    [10.4, 205.0, 5.250],
    [10.4, 215.0, 5.424],
    [14.7, 230.0, 5.345],
    [32.4, 66.0, 2.200],
    [30.4, 52.0, 1.615],
    [33.9, 65.0, 1.835],
    [21.5, 97.0, 2.465],
    [15.5, 150.0, 3.520],
    [15.2, 150.0, 3.435],
    [13.3, 245.0, 3.840],
    [19.2, 175.0, 3.845],
    [27.3, 66.0, 1.935],
    [26.0, 91.0, 2.140],
    [30.4, 113.0, 1.513],
    [15.8, 264.0, 3.170],
    [19.7, 175.0, 2.770],
    [15.0, 335.0, 3.570],
    [21.4, 109.0, 2.780],
])

# Law school admissions, 15 schools (Efron & Tibshirani 1993, Table 3.1)
# From R: bootstrap::law - EXACT VALUES
LAW_COLUMNS = ("LSAT", "GPA")

law = np.array([
    [576.0, 3.39],
    [635.0, 3.30],
    [558.0, 2.81],
    [578.0, 3.03],
    [666.0, 3.44],
    [580.0, 3.07],
    [555.0, 3.00],
    [661.0, 3.43],
    [651.0, 3.36],
    [605.0, 3.13],
    [653.0, 3.12],
    [575.0, 2.74],
    [545.0, 2.76],
    [572.0, 2.88],
    [594.0, 2.96],
])


def column(table_columns: tuple, name: str) -> int:
    """Position of a named column, e.g. column(MTCARS_COLUMNS, 'wt')."""
    try:
        return table_columns.index(name)
    except ValueError:
        raise KeyError(
            f"Unknown column {name!r}. Available: {list(table_columns)}"
        ) from None
