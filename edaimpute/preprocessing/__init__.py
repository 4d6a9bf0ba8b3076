"""Calculator/Applier pairs behind the imputation strategies."""
